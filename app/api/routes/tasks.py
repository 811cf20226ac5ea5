from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query

from app.api.dependencies import AdminUserDep, CurrentUserDep, SessionDep
from app.core import task_service
from app.core.logging import get_logger
from app.core.security import is_admin
from app.models.common import Pagination
from app.models.task import (
    TaskCreate,
    TaskListResponse,
    TaskStatus,
    TaskUpdate,
    TaskWithUser,
)
from app.models.user import User

logger = get_logger(__name__)

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={404: {"description": "Task not found"}},
)


@router.get("", response_model=TaskListResponse)
def list_tasks(
    session: SessionDep,
    current_user: CurrentUserDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    status: Optional[TaskStatus] = None,
    assigned_to: Optional[int] = None,
) -> TaskListResponse:
    """
    List tasks.

    **RBAC:** Employees only see tasks assigned to them; admins see all and
    may filter by ``assigned_to``.
    """
    target = assigned_to if is_admin(current_user) else current_user.user_id
    rows, total = task_service.list_tasks(
        session,
        assigned_to=target,
        status=status,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return TaskListResponse(
        tasks=[task_service.to_public(task, user) for task, user in rows],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=TaskWithUser, status_code=201)
def create_task(
    request: TaskCreate,
    session: SessionDep,
    current_user: AdminUserDep,
) -> TaskWithUser:
    """
    Assign a new task to an employee.

    **RBAC:** Admin only.
    """
    logger.info(f"Admin {current_user.email} creating task '{request.title}'")
    task, assignee = task_service.create_task(session, request)
    return task_service.to_public(task, assignee)


@router.get("/{task_id}", response_model=TaskWithUser)
def get_task(
    task_id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> TaskWithUser:
    task = task_service.get_task(session, task_id)
    if not is_admin(current_user) and task.assigned_to != current_user.user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return task_service.to_public(task, session.get(User, task.assigned_to))


@router.patch("/{task_id}", response_model=TaskWithUser)
def update_task(
    task_id: int,
    request: TaskUpdate,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> TaskWithUser:
    """
    Update a task.

    **RBAC:** Admins may change any field; the assignee may only change
    ``status``.
    """
    task, assignee = task_service.update_task(session, task_id, request, current_user)
    return task_service.to_public(task, assignee)


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    session: SessionDep,
    current_user: AdminUserDep,
) -> dict:
    """
    Delete a task.

    **RBAC:** Admin only.
    """
    logger.info(f"Admin {current_user.email} deleting task {task_id}")
    task_service.delete_task(session, task_id)
    return {"message": "Task deleted successfully"}
