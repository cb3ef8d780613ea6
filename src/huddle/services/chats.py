"""Chat membership: private/group creation, read tracking and deletion."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.core.errors import (
    ConflictError,
    ForbiddenError,
    NotAllowedError,
    NotFoundError,
    SelfChatError,
    TargetUnavailableError,
)
from huddle.db.time import Clock, as_utc, utcnow
from huddle.models.chat import Chat, ChatKind
from huddle.models.user import User
from huddle.repositories.chat_repo import ChatRepository
from huddle.repositories.message_repo import MessageRepository
from huddle.repositories.user_repo import UserRepository
from huddle.schemas.chat import ChatStats, ChatSummary
from huddle.schemas.message import MessageOut
from huddle.schemas.user import UserSummary

logger = logging.getLogger(__name__)

__all__ = ["ChatService"]


class ChatService:
    """Service handling chat creation, membership checks and read state."""

    def __init__(self, db: Session, clock: Clock = utcnow) -> None:
        self.db = db
        self.clock = clock
        self.chats = ChatRepository(db)
        self.messages = MessageRepository(db)
        self.users = UserRepository(db)

    def create_private(self, user_a: int, user_b: int) -> Chat:
        """Return the private chat between two users, creating it if needed.

        Idempotent per unordered pair: ``create_private(a, b)`` and
        ``create_private(b, a)`` always yield the same chat.

        Raises:
            SelfChatError: If both ids are the same.
            TargetUnavailableError: If either user doesn't exist.
        """
        if user_a == user_b:
            raise SelfChatError()

        existing = self.chats.find_private(user_a, user_b)
        if existing is not None:
            return existing

        if self.users.existing_ids({user_a, user_b}) != {user_a, user_b}:
            raise TargetUnavailableError("User not found")

        now = self.clock()
        chat = Chat(
            kind=ChatKind.PRIVATE,
            name=None,
            private_pair_key=Chat.pair_key(user_a, user_b),
            last_activity_at=now,
            created_at=now,
        )
        try:
            self.chats.add(chat, (user_a, user_b), joined_at=now)
            self.db.commit()
        except IntegrityError as exc:
            # Another request created the chat for this pair first; hand back that one.
            self.db.rollback()
            winner = self.chats.find_private(user_a, user_b)
            if winner is None:
                raise ConflictError() from exc
            logger.warning(
                "Concurrent private chat creation for %s and %s resolved to chat %s",
                user_a,
                user_b,
                winner.id,
            )
            return winner

        logger.info("Private chat %s created for %s and %s", chat.id, user_a, user_b)
        return chat

    def create_group(
        self,
        creator_id: int,
        name: str | None,
        member_ids: Iterable[int],
    ) -> Chat:
        """Create a group chat containing the creator and ``member_ids``."""
        members = [creator_id]
        for user_id in member_ids:
            if user_id not in members:
                members.append(user_id)

        if self.users.existing_ids(members) != set(members):
            raise TargetUnavailableError("User not found")

        now = self.clock()
        chat = Chat(
            kind=ChatKind.GROUP,
            name=name.strip() if name and name.strip() else None,
            last_activity_at=now,
            created_at=now,
        )
        self.chats.add(chat, members, joined_at=now)
        self.db.commit()
        logger.info("Group chat %s created by %s with %d members", chat.id, creator_id, len(members))
        return chat

    def is_member(self, chat_id: int, user_id: int) -> bool:
        return self.chats.is_member(chat_id, user_id)

    def require_member(self, chat_id: int, user_id: int) -> Chat:
        """Return the chat if ``user_id`` participates in it.

        Raises:
            NotFoundError: If the chat doesn't exist.
            ForbiddenError: If the user is not a participant.
        """
        chat = self.chats.get(chat_id)
        if chat is None:
            raise NotFoundError("Chat not found")
        if not self.chats.is_member(chat_id, user_id):
            raise ForbiddenError("You are not a participant in this chat.")
        return chat

    def other_participant(self, chat_id: int, user_id: int) -> User | None:
        """Return the other member of a private chat; None for groups."""
        chat = self.require_member(chat_id, user_id)
        if not chat.is_private:
            return None
        other_id = self.chats.other_member_id(chat_id, user_id)
        return self.users.get(other_id) if other_id is not None else None

    def unread_count_for(self, chat_id: int, user_id: int) -> int:
        """Count messages in the chat from other senders that are still unread."""
        self.require_member(chat_id, user_id)
        return self.chats.unread_count(chat_id, user_id)

    def mark_chat_read(self, chat_id: int, user_id: int) -> int:
        """Mark every message not sent by ``user_id`` as read; return how many changed."""
        self.require_member(chat_id, user_id)
        updated = self.chats.mark_read(chat_id, user_id, self.clock())
        self.db.commit()
        if updated > 0:
            logger.info("Chat %s: %d messages marked read by %s", chat_id, updated, user_id)
        return updated

    def delete_group(self, chat_id: int, actor_id: int) -> None:
        """Delete a group chat together with its messages and memberships.

        Raises:
            NotFoundError: If the chat doesn't exist.
            ForbiddenError: If the actor is not a member.
            NotAllowedError: If the chat is private.
        """
        chat = self.require_member(chat_id, actor_id)
        if chat.is_private:
            raise NotAllowedError("Private chats cannot be deleted.")
        self.chats.delete(chat_id)
        self.db.commit()
        self.db.expire_all()
        logger.info("Group chat %s deleted by %s", chat_id, actor_id)

    def get_chat(self, chat_id: int, user_id: int) -> ChatSummary:
        chat = self.require_member(chat_id, user_id)
        return self._summarize(chat, user_id)

    def list_for_user(self, user_id: int) -> list[ChatSummary]:
        """Return the user's chats, most recently active first."""
        return [self._summarize(chat, user_id) for chat in self.chats.list_for_user(user_id)]

    def stats(self, chat_id: int, user_id: int) -> ChatStats:
        chat = self.require_member(chat_id, user_id)
        today = self.clock().date()
        return ChatStats(
            total_messages=self.messages.count(chat_id),
            unread_messages=self.messages.count_unread(chat_id),
            messages_today=self.messages.count_on_day(chat_id, today),
            last_activity_at=as_utc(chat.last_activity_at),
            participants_count=self.chats.member_count(chat_id),
        )

    def _summarize(self, chat: Chat, user_id: int) -> ChatSummary:
        now = self.clock()
        participants = [UserSummary.from_user(user, now) for user in chat.participants]
        other = None
        if chat.is_private:
            other = next((p for p in participants if p.id != user_id), None)
        latest = self.messages.latest(chat.id)
        return ChatSummary(
            id=chat.id,
            kind=chat.kind,
            name=chat.name,
            participants=participants,
            last_activity_at=chat.last_activity_at,
            unread_count=self.chats.unread_count(chat.id, user_id),
            other_participant=other,
            last_message=MessageOut.model_validate(latest) if latest is not None else None,
        )
