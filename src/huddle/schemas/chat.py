"""Chat-related Pydantic schemas."""
from __future__ import annotations

from pydantic import BaseModel

from huddle.models.chat import ChatKind
from huddle.schemas.common import UtcDatetime
from huddle.schemas.message import MessageOut
from huddle.schemas.user import UserSummary


class ChatSummary(BaseModel):
    """Chat as shown to one participant."""

    id: int
    kind: ChatKind
    name: str | None
    participants: list[UserSummary]
    last_activity_at: UtcDatetime | None
    unread_count: int
    other_participant: UserSummary | None
    last_message: MessageOut | None = None


class ChatStats(BaseModel):
    total_messages: int
    unread_messages: int
    messages_today: int
    last_activity_at: UtcDatetime | None
    participants_count: int
