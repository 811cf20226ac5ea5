from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query

from app.api.dependencies import (
    AdminUserDep,
    ClockDep,
    CurrentUserDep,
    PolicyDep,
    SessionDep,
)
from app.core.employee_service import employee_service
from app.core.logging import get_logger
from app.core.security import is_admin
from app.models.common import Pagination
from app.models.user import (
    EmployeeCreate,
    EmployeeDetail,
    EmployeeListResponse,
    EmployeeUpdate,
    User,
    UserPublic,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/employees",
    tags=["employees"],
    responses={404: {"description": "Employee not found"}},
)


@router.get("", response_model=EmployeeListResponse)
def list_employees(
    session: SessionDep,
    current_user: AdminUserDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    search: str = "",
    department: str = "",
) -> EmployeeListResponse:
    """
    List employee accounts ordered by name.

    **RBAC:** Admin only.
    """
    employees, total = employee_service.list_employees(
        session,
        search=search.strip(),
        department=department.strip(),
        offset=(page - 1) * limit,
        limit=limit,
    )
    return EmployeeListResponse(
        employees=[UserPublic.model_validate(e) for e in employees],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=UserPublic, status_code=201)
def create_employee(
    request: EmployeeCreate,
    session: SessionDep,
    current_user: AdminUserDep,
) -> User:
    """
    Create an employee account.

    **RBAC:** Admin only.

    Raises:
        400 if the email address is already registered
    """
    logger.info(f"Admin {current_user.email} creating employee {request.email}")
    return employee_service.create_employee(session, request)


@router.get("/{employee_id}", response_model=EmployeeDetail)
def get_employee(
    employee_id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
    policy: PolicyDep,
    clock: ClockDep,
) -> EmployeeDetail:
    """
    Employee profile with year-to-date attendance statistics.

    **RBAC:** Admins can view anyone, employees only themselves.
    """
    if not is_admin(current_user) and current_user.user_id != employee_id:
        logger.warning(
            f"User {current_user.email} attempted to view employee {employee_id}"
        )
        raise HTTPException(status_code=403, detail="Forbidden")

    user = employee_service.get_user(session, employee_id)
    today = policy.local_date(clock())
    stats = employee_service.get_employee_stats(
        session, employee_id, date(today.year, 1, 1), policy.tz
    )
    return EmployeeDetail(**UserPublic.model_validate(user).model_dump(), stats=stats)


@router.patch("/{employee_id}", response_model=UserPublic)
def update_employee(
    employee_id: int,
    request: EmployeeUpdate,
    session: SessionDep,
    current_user: AdminUserDep,
) -> User:
    """
    Update an employee profile, including (de)activation.

    **RBAC:** Admin only.
    """
    logger.info(f"Admin {current_user.email} updating employee {employee_id}")
    return employee_service.update_employee(session, employee_id, request)


@router.delete("/{employee_id}")
def delete_employee(
    employee_id: int,
    session: SessionDep,
    current_user: AdminUserDep,
) -> dict:
    """
    Delete an employee together with their attendance records and tasks.

    **RBAC:** Admin only.
    """
    logger.info(f"Admin {current_user.email} deleting employee {employee_id}")
    employee_service.delete_employee(session, employee_id)
    return {"message": "Employee deleted successfully"}
