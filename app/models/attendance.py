"""
Attendance database model and schemas.

One row per employee per local calendar day. The row is created on check-in
and completed on check-out:

- ``check_in_time`` / ``check_out_time`` are naive UTC instants
- ``date`` is the attendance day (YYYY-MM-DD) in the configured time zone
- ``status`` is decided once at check-in and kept as is afterwards
- ``work_hours`` is filled in at check-out
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.clock import utcnow
from app.models.common import Pagination, timestamp_field
from app.models.user import UserSummary


class AttendanceStatus(str, Enum):
    """Status of an attendance record."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    ABSENT = "ABSENT"
    HALF_DAY = "HALF_DAY"


# Database Model


class Attendance(SQLModel, table=True):
    """ORM model for the attendance table."""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, nullable=False)
    date: str = Field(index=True, nullable=False, max_length=10)  # YYYY-MM-DD

    # Check-in
    check_in_time: Optional[datetime] = timestamp_field(default=None, nullable=True)
    check_in_lat: Optional[float] = Field(default=None)
    check_in_lng: Optional[float] = Field(default=None)
    check_in_addr: Optional[str] = Field(default=None, max_length=500)

    # Check-out
    check_out_time: Optional[datetime] = timestamp_field(default=None, nullable=True)
    check_out_lat: Optional[float] = Field(default=None)
    check_out_lng: Optional[float] = Field(default=None)
    check_out_addr: Optional[str] = Field(default=None, max_length=500)

    status: AttendanceStatus = Field(default=AttendanceStatus.ON_TIME, index=True)
    work_hours: Optional[Decimal] = Field(
        default=None, max_digits=6, decimal_places=2
    )
    notes: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = timestamp_field(default_factory=utcnow, nullable=False)
    updated_at: datetime = timestamp_field(default_factory=utcnow, nullable=False)


# Request Schemas


class GeoLocation(SQLModel):
    """Location captured by the browser at check-in or check-out."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: Optional[str] = Field(default=None, max_length=500)


class CheckInRequest(GeoLocation):
    pass


class CheckOutRequest(GeoLocation):
    pass


# Response Schemas


class AttendancePublic(SQLModel):
    id: int
    user_id: int
    date: str
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    check_in_lat: Optional[float] = None
    check_in_lng: Optional[float] = None
    check_in_addr: Optional[str] = None
    check_out_lat: Optional[float] = None
    check_out_lng: Optional[float] = None
    check_out_addr: Optional[str] = None
    status: AttendanceStatus
    work_hours: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AttendanceWithUser(AttendancePublic):
    user: UserSummary

    @classmethod
    def from_row(cls, record: Attendance, user) -> "AttendanceWithUser":
        return cls(**record.model_dump(), user=UserSummary.model_validate(user))


class AttendanceActionResponse(BaseModel):
    """Response for check-in and check-out."""

    message: str
    data: AttendancePublic


class AttendanceTodayResponse(BaseModel):
    """Today's attendance state for the current user."""

    date: str
    is_checked_in: bool
    is_checked_out: bool
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None
    work_hours: Optional[Decimal] = None


class AttendanceListResponse(BaseModel):
    records: list[AttendanceWithUser]
    pagination: Pagination
