"""
Task database model and schemas.

Tasks are created by administrators and assigned to one employee. The
assignee may only move the task through its status values.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator
from sqlmodel import Field, SQLModel

from app.core.clock import to_naive_utc, utcnow
from app.models.common import Pagination, timestamp_field
from app.models.user import UserSummary


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Task(SQLModel, table=True):
    """ORM model for the tasks table."""

    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    assigned_to: int = Field(foreign_key="users.id", index=True, nullable=False)
    due_date: Optional[datetime] = timestamp_field(default=None)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    status: TaskStatus = Field(default=TaskStatus.PENDING, index=True)

    created_at: datetime = timestamp_field(default_factory=utcnow, nullable=False)
    updated_at: datetime = timestamp_field(default_factory=utcnow, nullable=False)


class TaskCreate(SQLModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    assigned_to: int = Field(gt=0)
    due_date: Optional[datetime] = None
    priority: TaskPriority = TaskPriority.MEDIUM

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TaskUpdate(SQLModel):
    """Partial task update. Employees may only send ``status``."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TaskPublic(SQLModel):
    id: int
    title: str
    description: Optional[str] = None
    assigned_to: int
    due_date: Optional[datetime] = None
    priority: TaskPriority
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


class TaskWithUser(TaskPublic):
    user: UserSummary


class TaskListResponse(BaseModel):
    tasks: list[TaskWithUser]
    pagination: Pagination
