"""Identity store: registration, verification and presence."""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.core.errors import EmailTakenError, NotFoundError
from huddle.db.time import Clock, utcnow
from huddle.models.user import User
from huddle.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

__all__ = ["IdentityService"]


class IdentityService:
    """Service handling user records and presence."""

    def __init__(self, db: Session, clock: Clock = utcnow) -> None:
        self.db = db
        self.clock = clock
        self.users = UserRepository(db)

    def register(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        avatar: str | None = None,
    ) -> User:
        """Create an unverified account.

        Args:
            name: Display name.
            email: Address used for login and lookup; stored lower-cased.
            password_hash: Credential already hashed by the authentication layer.
            avatar: Optional stored avatar file name.

        Raises:
            EmailTakenError: If the address is already registered.
        """
        normalized = email.strip().lower()
        if self.users.get_by_email(normalized) is not None:
            raise EmailTakenError()

        user = User(
            name=name.strip(),
            email=normalized,
            password_hash=password_hash,
            avatar=avatar,
            created_at=self.clock(),
        )
        try:
            self.users.add(user)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Concurrent registration for the same email rejected")
            raise EmailTakenError() from exc

        self.db.refresh(user)
        logger.info("User %s registered", user.id)
        return user

    def get(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_by_email(self, email: str) -> User | None:
        return self.users.get_by_email(email)

    def mark_verified(self, user_id: int) -> bool:
        """Confirm the user's email address.

        Returns:
            True if the user moved from unverified to verified, False if it
            was already verified.
        """
        user = self.get(user_id)
        if user.is_verified:
            return False
        user.email_verified_at = self.clock()
        self.db.commit()
        logger.info("User %s verified their email", user_id)
        return True

    def touch(self, user_id: int) -> datetime:
        """Record activity for ``user_id`` and return the timestamp written."""
        user = self.get(user_id)
        now = self.clock()
        user.last_seen_at = now
        self.db.commit()
        return now

    def is_online(self, user: User) -> bool:
        return user.is_online(self.clock())
