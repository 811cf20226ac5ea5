from datetime import date as date_type
from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query, Response

from app.api.dependencies import (
    AdminUserDep,
    ClockDep,
    CurrentUserDep,
    PolicyDep,
    SessionDep,
)
from app.core import attendance_service
from app.core.attendance_service import AttendanceFilters
from app.core.export import attendance_csv, export_filename
from app.core.logging import get_logger
from app.core.security import is_admin
from app.models.attendance import (
    AttendanceActionResponse,
    AttendanceListResponse,
    AttendancePublic,
    AttendanceStatus,
    AttendanceTodayResponse,
    AttendanceWithUser,
    CheckInRequest,
    CheckOutRequest,
)
from app.models.common import Pagination

logger = get_logger(__name__)

router = APIRouter(
    prefix="/attendance",
    tags=["attendance"],
)


def _validate_day(value: Optional[str], name: str) -> Optional[str]:
    if value is None:
        return None
    try:
        return date_type.fromisoformat(value).isoformat()
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"{name} must be in YYYY-MM-DD format"
        )


def _build_filters(
    current_user,
    user_id: Optional[int],
    start_date: Optional[str],
    end_date: Optional[str],
    date: Optional[str],
    status: Optional[AttendanceStatus],
    search: Optional[str],
    department: Optional[str],
) -> AttendanceFilters:
    # Employees can only view their own attendance
    if is_admin(current_user):
        target_user_id = user_id
    else:
        target_user_id = current_user.user_id

    return AttendanceFilters(
        user_id=target_user_id,
        start_date=_validate_day(start_date, "start_date"),
        end_date=_validate_day(end_date, "end_date"),
        date=_validate_day(date, "date"),
        status=status,
        search=search or None,
        department=department or None,
    )


@router.get("", response_model=AttendanceListResponse)
def list_attendance(
    session: SessionDep,
    current_user: CurrentUserDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    user_id: Optional[int] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    date: Optional[str] = None,
    status: Optional[AttendanceStatus] = None,
    search: Optional[str] = None,
    department: Optional[str] = None,
) -> AttendanceListResponse:
    """
    List attendance records, newest day first.

    **RBAC:** Employees only see their own records; admins see everyone and
    may narrow the list with ``user_id``.
    """
    filters = _build_filters(
        current_user, user_id, start_date, end_date, date, status, search, department
    )
    rows, total = attendance_service.list_attendance(
        session, filters, offset=(page - 1) * limit, limit=limit
    )
    logger.info(
        f"User {current_user.email} listed attendance page {page} "
        f"({len(rows)} of {total})"
    )
    return AttendanceListResponse(
        records=[
            AttendanceWithUser.from_row(record, user) for record, user in rows
        ],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/export")
def export_attendance(
    session: SessionDep,
    current_user: AdminUserDep,
    policy: PolicyDep,
    clock: ClockDep,
    user_id: Optional[int] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    date: Optional[str] = None,
    status: Optional[AttendanceStatus] = None,
    search: Optional[str] = None,
    department: Optional[str] = None,
) -> Response:
    """
    Download the filtered attendance records as CSV.

    **RBAC:** Admin only.
    """
    filters = _build_filters(
        current_user, user_id, start_date, end_date, date, status, search, department
    )
    rows, total = attendance_service.list_attendance(session, filters)
    filename = export_filename(policy.local_date(clock()))
    logger.info(f"Admin {current_user.email} exported {total} attendance record(s)")
    return Response(
        content=attendance_csv(rows, policy.tz),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/check-in", response_model=AttendanceActionResponse)
def check_in(
    request: CheckInRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
    policy: PolicyDep,
    clock: ClockDep,
) -> AttendanceActionResponse:
    """
    Check the current user in for today.

    The record's status is LATE when the local check-in time is after the
    configured work start time plus the late threshold.

    Raises:
        400 if the user already checked in today
        404 if the user account no longer exists
    """
    logger.info(f"Check-in initiated by {current_user.email}")
    record, message = attendance_service.check_in(
        session, current_user.user_id, request, policy, clock()
    )
    return AttendanceActionResponse(
        message=message, data=AttendancePublic.model_validate(record)
    )


@router.post("/check-out", response_model=AttendanceActionResponse)
def check_out(
    request: CheckOutRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
    policy: PolicyDep,
    clock: ClockDep,
) -> AttendanceActionResponse:
    """
    Check the current user out for today and record the hours worked.

    Raises:
        400 if the user has not checked in today or already checked out
    """
    logger.info(f"Check-out initiated by {current_user.email}")
    record, message = attendance_service.check_out(
        session, current_user.user_id, request, policy, clock()
    )
    return AttendanceActionResponse(
        message=message, data=AttendancePublic.model_validate(record)
    )


@router.get("/today", response_model=AttendanceTodayResponse)
def get_today(
    session: SessionDep,
    current_user: CurrentUserDep,
    policy: PolicyDep,
    clock: ClockDep,
) -> AttendanceTodayResponse:
    """Today's check-in state of the current user."""
    return attendance_service.today_status(
        session, current_user.user_id, policy, clock()
    )
