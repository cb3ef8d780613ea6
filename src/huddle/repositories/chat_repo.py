"""Data access helpers for chats and their membership."""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from huddle.models.chat import Chat, ChatKind, ChatMember
from huddle.models.message import Message

__all__ = ["ChatRepository"]


class ChatRepository:
    """Thin wrapper around database access for chat entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, chat_id: int) -> Chat | None:
        return self.session.get(Chat, chat_id)

    def find_private(self, user_a: int, user_b: int) -> Chat | None:
        """Return the private chat for the unordered pair, if one exists."""
        result = self.session.execute(
            select(Chat).where(
                Chat.kind == ChatKind.PRIVATE,
                Chat.private_pair_key == Chat.pair_key(user_a, user_b),
            )
        )
        return result.scalars().first()

    def add(self, chat: Chat, member_ids: Iterable[int], joined_at: datetime) -> Chat:
        """Stage a chat together with its memberships."""
        self.session.add(chat)
        self.session.flush()
        for user_id in member_ids:
            self.session.add(ChatMember(chat_id=chat.id, user_id=user_id, joined_at=joined_at))
        self.session.flush()
        self.session.refresh(chat)
        return chat

    def is_member(self, chat_id: int, user_id: int) -> bool:
        result = self.session.execute(
            select(ChatMember.user_id).where(
                ChatMember.chat_id == chat_id,
                ChatMember.user_id == user_id,
            )
        )
        return result.first() is not None

    def other_member_id(self, chat_id: int, user_id: int) -> int | None:
        result = self.session.execute(
            select(ChatMember.user_id)
            .where(ChatMember.chat_id == chat_id, ChatMember.user_id != user_id)
            .order_by(ChatMember.user_id)
        )
        return result.scalars().first()

    def member_count(self, chat_id: int) -> int:
        return self.session.execute(
            select(func.count()).select_from(ChatMember).where(ChatMember.chat_id == chat_id)
        ).scalar_one()

    def list_for_user(self, user_id: int) -> list[Chat]:
        """Return chats the user belongs to, most recently active first."""
        result = self.session.execute(
            select(Chat)
            .join(ChatMember, ChatMember.chat_id == Chat.id)
            .where(ChatMember.user_id == user_id)
            .order_by(Chat.last_activity_at.desc().nulls_last(), Chat.id.desc())
        )
        return list(result.scalars().unique())

    def touch(self, chat_id: int, now: datetime) -> None:
        """Record ``now`` as the chat's last activity."""
        self.session.execute(
            update(Chat)
            .where(Chat.id == chat_id)
            .values(last_activity_at=now)
            .execution_options(synchronize_session="fetch")
        )

    def unread_count(self, chat_id: int, user_id: int) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(Message)
            .where(
                Message.chat_id == chat_id,
                Message.sender_id != user_id,
                Message.read_at.is_(None),
            )
        ).scalar_one()

    def mark_read(self, chat_id: int, user_id: int, now: datetime) -> int:
        """Set ``read_at`` on every currently unread message not sent by ``user_id``.

        A single UPDATE: rows inserted after the statement runs stay unread.
        """
        result = self.session.execute(
            update(Message)
            .where(
                Message.chat_id == chat_id,
                Message.sender_id != user_id,
                Message.read_at.is_(None),
            )
            .values(read_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete(self, chat_id: int) -> None:
        """Remove a chat with its messages and memberships."""
        self.session.execute(
            delete(Message).where(Message.chat_id == chat_id).execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(ChatMember)
            .where(ChatMember.chat_id == chat_id)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(Chat).where(Chat.id == chat_id).execution_options(synchronize_session=False)
        )
