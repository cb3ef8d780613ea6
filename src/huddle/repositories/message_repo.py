"""Data access helpers for the message ledger."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, UTC

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from huddle.models.message import Message

__all__ = ["MessageRepository"]


class MessageRepository:
    """Thin wrapper around database access for messages."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, message_id: int) -> Message | None:
        return self.session.get(Message, message_id, populate_existing=True)

    def add(self, message: Message) -> Message:
        self.session.add(message)
        self.session.flush()
        return message

    def delete(self, message: Message) -> None:
        self.session.delete(message)
        self.session.flush()

    def count(self, chat_id: int) -> int:
        return self.session.execute(
            select(func.count()).select_from(Message).where(Message.chat_id == chat_id)
        ).scalar_one()

    def count_unread(self, chat_id: int) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(Message)
            .where(Message.chat_id == chat_id, Message.read_at.is_(None))
        ).scalar_one()

    def count_on_day(self, chat_id: int, day: date) -> int:
        start = datetime.combine(day, time.min, tzinfo=UTC)
        end = start + timedelta(days=1)
        return self.session.execute(
            select(func.count())
            .select_from(Message)
            .where(
                Message.chat_id == chat_id,
                Message.created_at >= start,
                Message.created_at < end,
            )
        ).scalar_one()

    def latest(self, chat_id: int) -> Message | None:
        result = self.session.execute(
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        )
        return result.scalars().first()

    def newest_first(self, chat_id: int, *, offset: int, limit: int) -> list[Message]:
        """Return a window of the chat's messages ordered newest to oldest."""
        result = self.session.execute(
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars())

    def before(self, chat_id: int, before_id: int, limit: int) -> list[Message]:
        """Return up to ``limit`` messages with id below ``before_id``, newest first."""
        result = self.session.execute(
            select(Message)
            .where(Message.chat_id == chat_id, Message.id < before_id)
            .order_by(Message.id.desc())
            .limit(limit)
        )
        return list(result.scalars())

    def exists_before(self, chat_id: int, before_id: int) -> bool:
        result = self.session.execute(
            select(Message.id)
            .where(Message.chat_id == chat_id, Message.id < before_id)
            .limit(1)
        )
        return result.first() is not None
