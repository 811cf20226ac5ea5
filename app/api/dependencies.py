"""
Shared API dependencies.
Contains reusable dependency functions for FastAPI endpoints.
Centralizes common dependencies like database sessions, the session user,
the attendance policy and the clock.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from app.core import security
from app.core.attendance_policy import AttendancePolicy
from app.core.clock import utcnow
from app.core.database import get_session
from app.core.logging import get_logger
from app.core.security import TokenData
from app.core.settings_service import load_attendance_policy

logger = get_logger(__name__)

# Database session dependency
# Use this type annotation in route handlers to get automatic session injection
SessionDep = Annotated[Session, Depends(get_session)]


def get_current_user(request: Request) -> TokenData:
    """Session of the request; 401 when missing, invalid or expired."""
    session = security.get_session(request)
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session


def require_admin(
    current_user: Annotated[TokenData, Depends(get_current_user)],
) -> TokenData:
    if not security.is_admin(current_user):
        logger.warning(
            f"User {current_user.email} ({current_user.role.value}) denied admin access"
        )
        raise HTTPException(status_code=403, detail="Forbidden")
    return current_user


# Current User dependency for security
CurrentUserDep = Annotated[TokenData, Depends(get_current_user)]
AdminUserDep = Annotated[TokenData, Depends(require_admin)]


def get_clock() -> Callable[[], datetime]:
    """Source of "now" (naive UTC). Overridden in tests."""
    return utcnow


ClockDep = Annotated[Callable[[], datetime], Depends(get_clock)]


def get_attendance_policy(session: SessionDep) -> AttendancePolicy:
    return load_attendance_policy(session)


PolicyDep = Annotated[AttendancePolicy, Depends(get_attendance_policy)]
