"""
Check-in / check-out workflow.

State per user and attendance day::

    not checked in -> checked in -> checked out

A day has at most one attendance row. Status (ON_TIME / LATE) is decided at
check-in from the current policy and is not recomputed at check-out.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.attendance_policy import AttendancePolicy, compute_work_hours
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.attendance import (
    Attendance,
    AttendanceStatus,
    AttendanceTodayResponse,
    GeoLocation,
)
from app.models.user import User

logger = get_logger(__name__)


def get_record_for_day(
    session: Session, user_id: int, day: str
) -> Optional[Attendance]:
    statement = select(Attendance).where(
        (Attendance.user_id == user_id) & (Attendance.date == day)
    )
    return session.exec(statement).first()


def check_in(
    session: Session,
    user_id: int,
    location: GeoLocation,
    policy: AttendancePolicy,
    now: datetime,
) -> tuple[Attendance, str]:
    """
    Record the check-in of ``user_id`` at ``now`` (naive UTC).

    Args:
        session: Database session
        user_id: ID of the user checking in
        location: Browser geolocation and optional address
        policy: Attendance policy deciding the day and the status
        now: Current instant

    Returns:
        The record and a user-facing message

    Raises:
        NotFoundError: if the user no longer exists
        ValidationError: if the user already checked in today
    """
    if session.get(User, user_id) is None:
        logger.warning(f"Check-in for unknown user {user_id}")
        raise NotFoundError("User not found")

    today = policy.local_date(now).isoformat()
    status = policy.classify_check_in(now)

    record = get_record_for_day(session, user_id, today)
    if record and record.check_in_time:
        logger.warning(f"User {user_id} attempted a second check-in on {today}")
        raise ValidationError("Already checked in today")

    if record is None:
        logger.info(f"Creating attendance record for user {user_id} on {today}")
        record = Attendance(user_id=user_id, date=today)

    record.check_in_time = now
    record.check_in_lat = location.latitude
    record.check_in_lng = location.longitude
    record.check_in_addr = location.address
    record.status = status
    record.updated_at = now
    session.add(record)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        if get_record_for_day(session, user_id, today) is None:
            raise
        # A concurrent request created today's row first
        logger.warning(f"Duplicate check-in for user {user_id} on {today}")
        raise ValidationError("Already checked in today")
    session.refresh(record)

    logger.info(f"User {user_id} checked in at {now} UTC ({status.value})")
    if status == AttendanceStatus.LATE:
        return record, "Checked in (Late)"
    return record, "Checked in successfully"


def check_out(
    session: Session,
    user_id: int,
    location: GeoLocation,
    policy: AttendancePolicy,
    now: datetime,
) -> tuple[Attendance, str]:
    """
    Record the check-out of ``user_id`` at ``now`` (naive UTC).

    Work hours are computed from the check-in time. The status decided at
    check-in is kept.

    Args:
        session: Database session
        user_id: ID of the user checking out
        location: Browser geolocation and optional address
        policy: Attendance policy deciding the day
        now: Current instant

    Returns:
        The record and a user-facing message

    Raises:
        ValidationError: if there is no check-in today, the user already
            checked out, or ``now`` is before the check-in
    """
    today = policy.local_date(now).isoformat()

    record = get_record_for_day(session, user_id, today)
    if record is None or record.check_in_time is None:
        logger.warning(
            f"User {user_id} attempted check-out without check-in on {today}"
        )
        raise ValidationError("Not checked in today")
    if record.check_out_time is not None:
        logger.warning(f"User {user_id} attempted a second check-out on {today}")
        raise ValidationError("Already checked out today")
    if now < record.check_in_time:
        raise ValidationError("Check-out time cannot be before check-in time")

    record.check_out_time = now
    record.check_out_lat = location.latitude
    record.check_out_lng = location.longitude
    record.check_out_addr = location.address
    record.work_hours = compute_work_hours(record.check_in_time, now)
    record.updated_at = now
    session.add(record)
    session.commit()
    session.refresh(record)

    logger.info(
        f"User {user_id} checked out at {now} UTC after {record.work_hours} hours"
    )
    return record, "Checked out successfully"


def today_status(
    session: Session, user_id: int, policy: AttendancePolicy, now: datetime
) -> AttendanceTodayResponse:
    today = policy.local_date(now).isoformat()
    record = get_record_for_day(session, user_id, today)
    if record is None:
        return AttendanceTodayResponse(
            date=today, is_checked_in=False, is_checked_out=False
        )
    return AttendanceTodayResponse(
        date=today,
        is_checked_in=record.check_in_time is not None,
        is_checked_out=record.check_out_time is not None,
        check_in_time=record.check_in_time,
        check_out_time=record.check_out_time,
        status=record.status,
        work_hours=record.work_hours,
    )


# Listing


@dataclass
class AttendanceFilters:
    """Query filters shared by the attendance list and the CSV export."""

    user_id: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    date: Optional[str] = None
    status: Optional[AttendanceStatus] = None
    search: Optional[str] = None
    department: Optional[str] = None

    def apply(self, statement):
        if self.user_id is not None:
            statement = statement.where(Attendance.user_id == self.user_id)

        # A full range takes precedence over a single day
        if self.start_date and self.end_date:
            statement = statement.where(
                (Attendance.date >= self.start_date)
                & (Attendance.date <= self.end_date)
            )
        elif self.date:
            statement = statement.where(Attendance.date == self.date)

        if self.status is not None:
            statement = statement.where(Attendance.status == self.status)

        if self.search:
            statement = statement.where(
                func.lower(User.name).contains(self.search.lower())
            )
        if self.department:
            statement = statement.where(User.department == self.department)
        return statement


def list_attendance(
    session: Session,
    filters: AttendanceFilters,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> tuple[list[tuple[Attendance, User]], int]:
    """
    Attendance rows joined with their users, newest day first.

    Returns the requested page and the total number of matching rows.
    """
    base = select(Attendance, User).join(User, Attendance.user_id == User.id)
    statement = filters.apply(base).order_by(
        Attendance.date.desc(), Attendance.check_in_time.desc()
    )
    if offset is not None:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    rows = list(session.exec(statement).all())

    count_statement = filters.apply(
        select(func.count(Attendance.id)).join(User, Attendance.user_id == User.id)
    )
    total = session.exec(count_statement).one()
    return rows, total
