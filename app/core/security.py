"""
Session authentication.

The session is an HS256-signed JWT stored in an HTTP-only cookie. Its claims
are the user id (``sub``), email, role, issue time and expiry.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Request, Response
from jose import JWTError, jwt
from pydantic import BaseModel

from app.core.config import settings
from app.core.logging import get_logger
from app.models.user import Role

logger = get_logger(__name__)


class TokenData(BaseModel):
    """Verified claims of a session token."""

    sub: str
    email: str
    role: Role
    exp: int
    iat: Optional[int] = None

    @property
    def user_id(self) -> int:
        return int(self.sub)


# Passwords


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash could not be parsed")
        return False


# Tokens


def create_access_token(
    user_id: int, email: str, role: Role, now: Optional[datetime] = None
) -> str:
    issued = now or datetime.now(timezone.utc)
    expires = issued + timedelta(days=settings.TOKEN_EXPIRE_DAYS)
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": Role(role).value,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Optional[TokenData]:
    """Return the claims of a valid token, ``None`` if invalid or expired."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
        return TokenData(**payload)
    except (JWTError, ValueError) as e:
        logger.debug(f"Token verification failed: {e}")
        return None


def get_session(request: Request) -> Optional[TokenData]:
    """Session of the current request, or ``None`` when not logged in."""
    token = request.cookies.get(settings.COOKIE_NAME)
    if not token:
        return None
    return verify_token(token)


def is_admin(session: Optional[TokenData]) -> bool:
    return session is not None and session.role == Role.ADMIN


def is_employee(session: Optional[TokenData]) -> bool:
    return session is not None and session.role == Role.EMPLOYEE


# Cookies


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=60 * 60 * 24 * settings.TOKEN_EXPIRE_DAYS,
        path="/",
    )


def remove_auth_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.COOKIE_NAME, path="/")


NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}
