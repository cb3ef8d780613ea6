# src/huddle/models/message.py
"""Models describing chat messages."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from huddle.db.session import Base
from huddle.db.time import utcnow
from huddle.models.chat import Chat
from huddle.models.user import User


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


class Message(Base):
    """Single entry in a chat's message ledger.

    Ordering within a chat is ``created_at`` with ``id`` as tie-break; ids are
    assigned monotonically by the store.
    """

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chat_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    message_type: Mapped[MessageType] = mapped_column(
        Enum(
            MessageType,
            name="message_type",
            native_enum=False,
            length=16,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=MessageType.TEXT,
    )
    # Unset means unread.
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    chat: Mapped[Chat] = relationship(Chat, back_populates="messages")
    sender: Mapped[User] = relationship(User, lazy="joined")

    __table_args__ = (
        Index("ix_messages_chat_created", "chat_id", "created_at", "id"),
        Index("ix_messages_chat_unread", "chat_id", "read_at"),
    )

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    @property
    def preview(self) -> str:
        """Short text suitable for chat lists."""
        if self.message_type == MessageType.IMAGE:
            return "[Image]"
        if self.message_type == MessageType.FILE:
            return "[File]"
        return self.content
