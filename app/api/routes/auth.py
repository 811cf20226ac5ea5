from fastapi import APIRouter, HTTPException, Response

from app.api.dependencies import CurrentUserDep, SessionDep
from app.core.employee_service import employee_service
from app.core.logging import get_logger
from app.core.security import (
    NO_CACHE_HEADERS,
    create_access_token,
    remove_auth_cookie,
    set_auth_cookie,
    verify_password,
)
from app.models.user import LoginRequest, User, UserPublic

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=UserPublic)
def login(request: LoginRequest, session: SessionDep, response: Response) -> User:
    """
    Verify credentials and start a session.

    The signed session token is returned in the HTTP-only ``auth_token``
    cookie; the body carries the user so the client can route by role.
    """
    user = employee_service.get_user_by_email(session, request.email)
    if not user or not verify_password(request.password, user.password_hash):
        logger.warning(f"Failed login for {request.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        logger.warning(f"Login refused for deactivated account {user.email}")
        raise HTTPException(status_code=403, detail="Account is deactivated")

    token = create_access_token(user.id, user.email, user.role)
    set_auth_cookie(response, token)
    logger.info(f"User {user.email} logged in ({user.role.value})")
    return user


@router.post("/logout")
def logout(response: Response) -> dict:
    remove_auth_cookie(response)
    response.headers.update(NO_CACHE_HEADERS)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserPublic)
def get_me(session: SessionDep, current_user: CurrentUserDep) -> User:
    """Profile of the logged-in user."""
    user = session.get(User, current_user.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
