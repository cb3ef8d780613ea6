"""User-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from huddle.models.user import User
from huddle.schemas.common import PageMeta, UtcDatetime


class UserSummary(BaseModel):
    """Denormalized identity fields needed to render a user without a second lookup."""

    id: int
    name: str
    email: str
    avatar_url: str
    is_online: bool
    last_seen_at: UtcDatetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_user(cls, user: User, now: datetime) -> UserSummary:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            avatar_url=user.avatar_url,
            is_online=user.is_online(now),
            last_seen_at=user.last_seen_at,
        )


class UserSearchResult(UserSummary):
    """User summary annotated with the caller's relationship to that user."""

    friendship_status: str = "none"
    friendship_id: int | None = None
    can_send_request: bool = True
    can_accept: bool = False
    can_decline: bool = False


class UserSearchPage(BaseModel):
    items: list[UserSearchResult]
    pagination: PageMeta
