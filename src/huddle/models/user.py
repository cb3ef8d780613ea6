# src/huddle/models/user.py
"""SQLAlchemy model for user identities."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from huddle.core.settings import settings
from huddle.db.session import Base
from huddle.db.time import as_utc, utcnow


class User(Base):
    """Registered account.

    The password credential is stored as an opaque hash produced by the
    authentication layer; this core never inspects it.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Set once when the address is confirmed; never cleared.
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @property
    def is_verified(self) -> bool:
        return self.email_verified_at is not None

    def is_online(self, now: datetime, window_minutes: int | None = None) -> bool:
        """Return True if the user was seen within the presence window."""
        if self.last_seen_at is None:
            return False
        window = timedelta(
            minutes=settings.online_window_minutes if window_minutes is None else window_minutes
        )
        return now - as_utc(self.last_seen_at) <= window

    @property
    def avatar_url(self) -> str:
        """Return the uploaded avatar URL or a Gravatar identicon fallback."""
        if self.avatar:
            return f"{settings.avatar_base_url.rstrip('/')}/{self.avatar}"
        digest = hashlib.md5(self.email.strip().lower().encode("utf-8")).hexdigest()
        return f"{settings.gravatar_base_url.rstrip('/')}/{digest}?d=identicon&s=150"


# Lookups are case-insensitive, so uniqueness must be too.
Index("uq_users_email_lower", func.lower(User.email), unique=True)
