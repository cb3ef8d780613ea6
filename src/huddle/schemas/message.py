"""Message-related Pydantic schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from huddle.models.message import MessageType
from huddle.schemas.common import PageMeta, UtcDatetime


class MessageOut(BaseModel):
    """Schema for message information returned to callers."""

    id: int
    chat_id: int
    sender_id: int
    content: str
    message_type: MessageType
    is_read: bool
    read_at: UtcDatetime | None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class MessagePage(BaseModel):
    """Offset page of messages; ``items`` run oldest to newest."""

    items: list[MessageOut]
    pagination: PageMeta


class MessageWindow(BaseModel):
    """Cursor window of older messages; ``items`` run oldest to newest."""

    items: list[MessageOut]
    has_more: bool
