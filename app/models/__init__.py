"""
Database models and schemas module.
Contains all SQLModel table definitions and Pydantic schemas.
"""

from app.models.attendance import (
    Attendance,
    AttendancePublic,
    AttendanceStatus,
    AttendanceWithUser,
    CheckInRequest,
    CheckOutRequest,
)
from app.models.setting import Setting, SettingItem, SettingPublic, SettingsUpdate
from app.models.task import (
    Task,
    TaskCreate,
    TaskPriority,
    TaskPublic,
    TaskStatus,
    TaskUpdate,
)
from app.models.user import (
    EmployeeCreate,
    EmployeeUpdate,
    Role,
    User,
    UserPublic,
    UserSummary,
)

__all__ = [
    "User",
    "Role",
    "UserPublic",
    "UserSummary",
    "EmployeeCreate",
    "EmployeeUpdate",
    "Attendance",
    "AttendanceStatus",
    "AttendancePublic",
    "AttendanceWithUser",
    "CheckInRequest",
    "CheckOutRequest",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskPublic",
    "TaskPriority",
    "TaskStatus",
    "Setting",
    "SettingItem",
    "SettingPublic",
    "SettingsUpdate",
]
