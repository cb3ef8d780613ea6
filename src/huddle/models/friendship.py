# src/huddle/models/friendship.py
"""Models describing friend requests and friendships."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from huddle.db.session import Base
from huddle.db.time import utcnow
from huddle.models.user import User


class FriendshipStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


def canonical_pair(user_a: int, user_b: int) -> tuple[int, int]:
    """Return the (low, high) key identifying an unordered pair of users."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


class Friendship(Base):
    """Directional request between two users plus its current status.

    ``pair_low``/``pair_high`` hold the canonical unordered key so the storage
    layer rejects a second row for the same two users in either direction.
    """

    __tablename__ = "friendships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    requester_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    addressee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[FriendshipStatus] = mapped_column(
        Enum(
            FriendshipStatus,
            name="friendship_status",
            native_enum=False,
            length=16,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=FriendshipStatus.PENDING,
        index=True,
    )
    pair_low: Mapped[int] = mapped_column(Integer, nullable=False)
    pair_high: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    requester: Mapped[User] = relationship(User, foreign_keys=[requester_id], lazy="joined")
    addressee: Mapped[User] = relationship(User, foreign_keys=[addressee_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("pair_low", "pair_high", name="uq_friendships_pair"),
        CheckConstraint("requester_id <> addressee_id", name="ck_friendships_not_self"),
        Index("ix_friendships_requester_status", "requester_id", "status"),
        Index("ix_friendships_addressee_status", "addressee_id", "status"),
    )

    @classmethod
    def request(cls, requester_id: int, addressee_id: int, now: datetime) -> Friendship:
        """Build a pending request from ``requester_id`` to ``addressee_id``."""
        low, high = canonical_pair(requester_id, addressee_id)
        return cls(
            requester_id=requester_id,
            addressee_id=addressee_id,
            status=FriendshipStatus.PENDING,
            pair_low=low,
            pair_high=high,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == FriendshipStatus.PENDING

    @property
    def is_accepted(self) -> bool:
        return self.status == FriendshipStatus.ACCEPTED

    @property
    def is_declined(self) -> bool:
        return self.status == FriendshipStatus.DECLINED

    def involves(self, user_id: int) -> bool:
        return user_id in (self.requester_id, self.addressee_id)

    def other_party_id(self, user_id: int) -> int | None:
        """Return the id of the user on the other side, or None if not involved."""
        if user_id == self.requester_id:
            return self.addressee_id
        if user_id == self.addressee_id:
            return self.requester_id
        return None

    def other_party(self, user_id: int) -> User | None:
        if user_id == self.requester_id:
            return self.addressee
        if user_id == self.addressee_id:
            return self.requester
        return None
