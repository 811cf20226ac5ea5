"""
Task assignment service.

Administrators create, edit and delete tasks. The assignee may only change
the ``status`` of their own tasks.
"""

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.clock import utcnow
from app.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.core.logging import get_logger
from app.core.security import TokenData, is_admin
from app.models.task import Task, TaskCreate, TaskStatus, TaskUpdate, TaskWithUser
from app.models.user import Role, User, UserSummary

logger = get_logger(__name__)

EMPLOYEE_EDITABLE_FIELDS = {"status"}

# Columns that may be left out of an update but never set to null
NON_NULLABLE_FIELDS = ("title", "priority", "status")


def to_public(task: Task, user: User) -> TaskWithUser:
    return TaskWithUser(**task.model_dump(), user=UserSummary.model_validate(user))


def get_task(session: Session, task_id: int) -> Task:
    task = session.get(Task, task_id)
    if not task:
        raise NotFoundError("Task not found")
    return task


def list_tasks(
    session: Session,
    assigned_to: Optional[int] = None,
    status: Optional[TaskStatus] = None,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[tuple[Task, User]], int]:
    """
    Tasks with their assignees, most recently created first.

    Args:
        session: Database session
        assigned_to: Only tasks of this user
        status: Only tasks in this status
        offset: Number of rows to skip
        limit: Page size

    Returns:
        The page of (task, assignee) rows and the total number of matches
    """
    conditions = []
    if assigned_to is not None:
        conditions.append(Task.assigned_to == assigned_to)
    if status is not None:
        conditions.append(Task.status == status)

    statement = (
        select(Task, User)
        .join(User, Task.assigned_to == User.id)
        .where(*conditions)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .offset(offset)
        .limit(limit)
    )
    rows = list(session.exec(statement).all())
    total = session.exec(select(func.count(Task.id)).where(*conditions)).one()
    return rows, total


def create_task(session: Session, data: TaskCreate) -> tuple[Task, User]:
    """
    Create a task for an employee.

    Args:
        session: Database session
        data: Task details

    Returns:
        The created task and its assignee

    Raises:
        ValidationError: if the assignee does not exist or is not an employee
    """
    assignee = session.get(User, data.assigned_to)
    if not assignee or assignee.role != Role.EMPLOYEE:
        raise ValidationError("Assignee not found")

    task = Task(**data.model_dump())
    session.add(task)
    session.commit()
    session.refresh(task)
    logger.info(f"Created task {task.id} for user {assignee.id}")
    return task, assignee


def update_task(
    session: Session, task_id: int, data: TaskUpdate, actor: TokenData
) -> tuple[Task, User]:
    """
    Apply a partial update.

    Administrators may change any field. The assignee may only change
    ``status``.

    Args:
        session: Database session
        task_id: ID of the task
        data: Fields sent by the client
        actor: Session of the user making the change

    Returns:
        The updated task and its assignee

    Raises:
        NotFoundError: if the task does not exist
        PermissionDeniedError: if an employee edits another user's task or a
            field other than ``status``
        ValidationError: if a required field is sent as null
    """
    task = get_task(session, task_id)
    changes = data.model_dump(exclude_unset=True)

    if not is_admin(actor):
        if task.assigned_to != actor.user_id:
            logger.warning(f"User {actor.email} attempted to edit task {task_id}")
            raise PermissionDeniedError("Forbidden")
        if set(changes) - EMPLOYEE_EDITABLE_FIELDS:
            raise PermissionDeniedError("Only status can be updated")

    for field in NON_NULLABLE_FIELDS:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")

    for field, value in changes.items():
        setattr(task, field, value)
    task.updated_at = utcnow()
    session.add(task)
    session.commit()
    session.refresh(task)
    logger.info(f"Task {task_id} updated by {actor.email}: {sorted(changes)}")
    return task, session.get(User, task.assigned_to)


def delete_task(session: Session, task_id: int) -> None:
    task = get_task(session, task_id)
    session.delete(task)
    session.commit()
    logger.info(f"Deleted task {task_id}")
