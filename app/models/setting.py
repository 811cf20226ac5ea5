"""
Key/value settings rows.

Holds the attendance policy (work hours, late threshold, time zone) and
company information. Rows are global and editable by administrators.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.clock import utcnow
from app.models.common import timestamp_field


class Setting(SQLModel, table=True):
    __tablename__ = "settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(index=True, unique=True, max_length=100)
    value: str = Field(max_length=1000)
    description: Optional[str] = Field(default=None, max_length=255)
    updated_at: datetime = timestamp_field(default_factory=utcnow, nullable=False)


class SettingItem(SQLModel):
    key: str = Field(min_length=1, max_length=100)
    value: str = Field(min_length=1, max_length=1000)


class SettingsUpdate(SQLModel):
    """Batch update body for PUT /api/settings."""

    settings: list[SettingItem]


class SettingPublic(SQLModel):
    id: int
    key: str
    value: str
    description: Optional[str] = None
    updated_at: datetime
