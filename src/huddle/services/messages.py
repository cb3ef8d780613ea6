"""Message ledger: append, edit, delete, read receipts and pagination."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from huddle.core.errors import (
    ForbiddenError,
    NotFoundError,
    SelfReadError,
    ValidationFailedError,
    ValidationReason,
)
from huddle.core.settings import settings
from huddle.db.time import Clock, utcnow
from huddle.models.message import Message, MessageType
from huddle.repositories.chat_repo import ChatRepository
from huddle.repositories.message_repo import MessageRepository
from huddle.schemas.common import PageMeta
from huddle.schemas.message import MessageOut, MessagePage, MessageWindow
from huddle.services.chats import ChatService
from huddle.services.content_policy import ContentPolicy, content_policy

logger = logging.getLogger(__name__)

__all__ = ["MessageService"]


class MessageService:
    """Service owning the per-chat message log.

    Every operation first checks that the actor participates in the chat.
    Content goes through the :class:`ContentPolicy` on both create and edit.
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = utcnow,
        policy: ContentPolicy = content_policy,
    ) -> None:
        self.db = db
        self.clock = clock
        self.policy = policy
        self.chat_service = ChatService(db, clock)
        self.chats = ChatRepository(db)
        self.messages = MessageRepository(db)

    def append(
        self,
        chat_id: int,
        sender_id: int,
        content: str,
        message_type: MessageType | str = MessageType.TEXT,
    ) -> Message:
        """Store a new message and bump the chat's last activity.

        Args:
            chat_id: Chat receiving the message.
            sender_id: Authenticated author; must be a member of the chat.
            content: Raw payload as submitted.
            message_type: ``text``, ``image`` or ``file``.

        Returns:
            The stored message, with sanitized content.

        Raises:
            NotFoundError: If the chat doesn't exist.
            ForbiddenError: If the sender isn't a participant.
            ValidationFailedError: If the content policy rejects the payload.
        """
        self.chat_service.require_member(chat_id, sender_id)
        message_type = self.policy.coerce_type(message_type)
        sanitized = self.policy.prepare(content, message_type)

        now = self.clock()
        message = Message(
            chat_id=chat_id,
            sender_id=sender_id,
            content=sanitized,
            message_type=message_type,
            read_at=None,
            created_at=now,
            updated_at=now,
        )
        self.messages.add(message)
        self.chats.touch(chat_id, now)
        self.db.commit()

        logger.info(
            "Message %s created in chat %s by %s (type=%s, length=%d)",
            message.id,
            chat_id,
            sender_id,
            message_type.value,
            len(sanitized),
        )
        return message

    def get(self, chat_id: int, message_id: int, actor_id: int) -> Message:
        self.chat_service.require_member(chat_id, actor_id)
        return self._message_in_chat(chat_id, message_id)

    def edit(self, chat_id: int, message_id: int, actor_id: int, content: str) -> Message:
        """Replace the content of the actor's own message.

        The stored type is reused for validation; read state and
        ``created_at`` are left untouched.
        """
        self.chat_service.require_member(chat_id, actor_id)
        message = self._message_in_chat(chat_id, message_id)
        if message.sender_id != actor_id:
            raise ForbiddenError("You can only edit your own messages.")

        sanitized = self.policy.prepare(content, message.message_type)
        message.content = sanitized
        message.updated_at = self.clock()
        self.db.commit()

        logger.info(
            "Message %s updated in chat %s by %s (length=%d)",
            message_id,
            chat_id,
            actor_id,
            len(sanitized),
        )
        return message

    def delete(self, chat_id: int, message_id: int, actor_id: int) -> None:
        self.chat_service.require_member(chat_id, actor_id)
        message = self._message_in_chat(chat_id, message_id)
        if message.sender_id != actor_id:
            raise ForbiddenError("You can only delete your own messages.")
        self.messages.delete(message)
        self.db.commit()
        logger.info("Message %s deleted from chat %s by %s", message_id, chat_id, actor_id)

    def mark_read(self, chat_id: int, message_id: int, actor_id: int) -> Message:
        """Set the read timestamp on someone else's message; no-op if already read."""
        self.chat_service.require_member(chat_id, actor_id)
        message = self._message_in_chat(chat_id, message_id)
        if message.sender_id == actor_id:
            raise SelfReadError()
        if message.is_read:
            return message

        message.read_at = self.clock()
        self.db.commit()
        logger.info(
            "Message %s marked read by %s (sender %s)", message_id, actor_id, message.sender_id
        )
        return message

    def page(
        self,
        chat_id: int,
        actor_id: int,
        page: int = 1,
        per_page: int | None = None,
    ) -> MessagePage:
        """Return one page of history.

        Page 1 holds the newest ``per_page`` messages; items within a page are
        ordered oldest to newest for display.
        """
        self.chat_service.require_member(chat_id, actor_id)
        per_page = settings.messages_per_page if per_page is None else per_page
        if page < 1 or not 1 <= per_page <= settings.max_page_size:
            raise ValidationFailedError(
                ValidationReason.INVALID_PAGINATION,
                f"page must be >= 1 and per_page between 1 and {settings.max_page_size}.",
            )

        total = self.messages.count(chat_id)
        window = self.messages.newest_first(chat_id, offset=(page - 1) * per_page, limit=per_page)
        window.reverse()
        return MessagePage(
            items=[MessageOut.model_validate(message) for message in window],
            pagination=PageMeta.build(page=page, per_page=per_page, total=total, count=len(window)),
        )

    def older_than(
        self,
        chat_id: int,
        actor_id: int,
        before_id: int,
        limit: int | None = None,
    ) -> MessageWindow:
        """Return up to ``limit`` messages older than ``before_id`` for lazy loading.

        Cursor based, so messages arriving meanwhile never shift the window.
        """
        self.chat_service.require_member(chat_id, actor_id)
        limit = settings.messages_per_page if limit is None else limit
        if not 1 <= limit <= settings.max_page_size:
            raise ValidationFailedError(
                ValidationReason.INVALID_PAGINATION,
                f"limit must be between 1 and {settings.max_page_size}.",
            )

        window = self.messages.before(chat_id, before_id, limit)
        window.reverse()
        oldest_id = window[0].id if window else before_id
        return MessageWindow(
            items=[MessageOut.model_validate(message) for message in window],
            has_more=self.messages.exists_before(chat_id, oldest_id),
        )

    def _message_in_chat(self, chat_id: int, message_id: int) -> Message:
        message = self.messages.get(message_id)
        if message is None or message.chat_id != chat_id:
            raise NotFoundError("Message not found in this chat.")
        return message
