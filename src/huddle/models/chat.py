# src/huddle/models/chat.py
"""SQLAlchemy models for chats and chat membership."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from huddle.db.session import Base
from huddle.db.time import utcnow
from huddle.models.user import User

if TYPE_CHECKING:
    from huddle.models.message import Message


class ChatKind(StrEnum):
    PRIVATE = "private"
    GROUP = "group"


class Chat(Base):
    """A private (two-party) or group conversation."""

    __tablename__ = "chats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[ChatKind] = mapped_column(
        Enum(
            ChatKind,
            name="chat_kind",
            native_enum=False,
            length=16,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Denormalized from the message ledger; written in the same transaction as each insert.
    last_activity_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    # "<low>:<high>" for private chats, NULL for groups.
    private_pair_key: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    members: Mapped[list[ChatMember]] = relationship(
        "ChatMember",
        back_populates="chat",
        lazy="selectin",
        order_by="ChatMember.user_id",
    )
    messages: Mapped[list[Message]] = relationship(
        "Message",
        back_populates="chat",
        lazy="raise",
    )

    @staticmethod
    def pair_key(user_a: int, user_b: int) -> str:
        low, high = sorted((user_a, user_b))
        return f"{low}:{high}"

    @property
    def is_private(self) -> bool:
        return self.kind == ChatKind.PRIVATE

    @property
    def is_group(self) -> bool:
        return self.kind == ChatKind.GROUP

    @property
    def member_ids(self) -> list[int]:
        return [member.user_id for member in self.members]

    @property
    def participants(self) -> list[User]:
        return [member.user for member in self.members]


class ChatMember(Base):
    """Join table mapping users into chats."""

    __tablename__ = "chat_members"

    chat_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    chat: Mapped[Chat] = relationship(Chat, back_populates="members")
    user: Mapped[User] = relationship(User, lazy="joined")
