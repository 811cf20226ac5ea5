"""
User database model and schemas.

Users are either administrators or employees. Employees are created by an
administrator (or the seed script); the email address is the login name and
is always stored in lower case.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator
from sqlmodel import Field, SQLModel

from app.core.clock import utcnow
from app.models.common import Pagination, timestamp_field


class Role(str, Enum):
    """Role carried in the session token."""

    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class User(SQLModel, table=True):
    """ORM model for the users table."""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True, max_length=255)
    password_hash: str = Field(max_length=255)
    name: str = Field(max_length=255)
    role: Role = Field(default=Role.EMPLOYEE, index=True)

    department: Optional[str] = Field(default=None, max_length=255, index=True)
    position: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    avatar: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True)

    created_at: datetime = timestamp_field(default_factory=utcnow, nullable=False)
    updated_at: datetime = timestamp_field(default_factory=utcnow, nullable=False)


# Request Schemas


class LoginRequest(SQLModel):
    email: EmailStr
    password: str = Field(min_length=6)


class EmployeeCreate(SQLModel):
    """Schema for creating an employee account (admin only)."""

    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=2, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=255)
    position: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class EmployeeUpdate(SQLModel):
    """Partial update of an employee profile (admin only)."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=255)
    position: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None


# Response Schemas


class UserPublic(SQLModel):
    """User as returned by the API. Never includes the password hash."""

    id: int
    email: str
    name: str
    role: Role
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserSummary(SQLModel):
    """Compact user reference embedded in attendance and task responses."""

    id: int
    name: str
    email: str
    department: Optional[str] = None
    position: Optional[str] = None


class EmployeeStats(BaseModel):
    """Year-to-date attendance statistics for one employee."""

    total_attendance: int
    avg_work_hours: float
    avg_check_in: str
    avg_check_out: str


class EmployeeDetail(UserPublic):
    stats: EmployeeStats


class EmployeeListResponse(BaseModel):
    employees: list[UserPublic]
    pagination: Pagination
