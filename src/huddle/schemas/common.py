"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from datetime import datetime
from math import ceil
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from huddle.db.time import as_utc

UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class PageMeta(BaseModel):
    """Offset pagination metadata returned alongside a page of results."""

    current_page: int = Field(..., ge=1)
    last_page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    has_more_pages: bool
    from_item: int | None = Field(None, description="1-based index of the first item on the page.")
    to_item: int | None = Field(None, description="1-based index of the last item on the page.")

    @classmethod
    def build(cls, *, page: int, per_page: int, total: int, count: int) -> PageMeta:
        last_page = max(1, ceil(total / per_page))
        first = (page - 1) * per_page + 1
        return cls(
            current_page=page,
            last_page=last_page,
            per_page=per_page,
            total=total,
            has_more_pages=page < last_page,
            from_item=first if count else None,
            to_item=first + count - 1 if count else None,
        )
