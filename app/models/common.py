"""Schemas shared by several resources."""

import math
from typing import Any

from pydantic import BaseModel
from sqlalchemy import DateTime
from sqlmodel import Field


def timestamp_field(**kwargs: Any) -> Any:
    """
    Field for a naive UTC instant.

    The column type is pinned to a plain ``DateTime`` so values are stored
    and read back without time zone information.
    """
    return Field(sa_type=DateTime, **kwargs)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if limit else 0,
        )
