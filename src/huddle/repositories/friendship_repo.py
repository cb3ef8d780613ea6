"""Data access helpers for the friendship graph.

:meth:`FriendshipRepository.between` is the only place the unordered-pair
lookup is expressed; everything that needs to know how two users relate goes
through it.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from huddle.models.friendship import Friendship, FriendshipStatus, canonical_pair

__all__ = ["FriendshipRepository"]


class FriendshipRepository:
    """Thin wrapper around database access for friendship rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, friendship_id: int) -> Friendship | None:
        return self.session.get(Friendship, friendship_id, populate_existing=True)

    def between(self, user_a: int, user_b: int) -> Friendship | None:
        """Return the single row for the unordered pair, regardless of direction."""
        low, high = canonical_pair(user_a, user_b)
        result = self.session.execute(
            select(Friendship)
            .where(Friendship.pair_low == low, Friendship.pair_high == high)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def add(self, friendship: Friendship) -> Friendship:
        self.session.add(friendship)
        self.session.flush()
        return friendship

    def transition(
        self,
        friendship_id: int,
        *,
        addressee_id: int,
        target: FriendshipStatus,
        now: datetime,
    ) -> bool:
        """Move a pending row addressed to ``addressee_id`` to ``target``.

        Executed as a single conditional UPDATE so a concurrent cancel or
        second transition leaves zero rows matched instead of overwriting.
        """
        result = self.session.execute(
            update(Friendship)
            .where(
                Friendship.id == friendship_id,
                Friendship.addressee_id == addressee_id,
                Friendship.status == FriendshipStatus.PENDING,
            )
            .values(status=target, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def delete_pending_sent_by(self, friendship_id: int, requester_id: int) -> bool:
        result = self.session.execute(
            delete(Friendship)
            .where(
                Friendship.id == friendship_id,
                Friendship.requester_id == requester_id,
                Friendship.status == FriendshipStatus.PENDING,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def delete_accepted(self, friendship_id: int) -> bool:
        result = self.session.execute(
            delete(Friendship)
            .where(
                Friendship.id == friendship_id,
                Friendship.status == FriendshipStatus.ACCEPTED,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def list_accepted_for(self, user_id: int) -> list[Friendship]:
        result = self.session.execute(
            select(Friendship)
            .where(
                Friendship.status == FriendshipStatus.ACCEPTED,
                or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id),
            )
            .order_by(Friendship.updated_at.desc(), Friendship.id.desc())
        )
        return list(result.scalars().unique())

    def list_pending_sent(self, user_id: int) -> list[Friendship]:
        result = self.session.execute(
            select(Friendship)
            .where(
                Friendship.requester_id == user_id,
                Friendship.status == FriendshipStatus.PENDING,
            )
            .order_by(Friendship.created_at.desc(), Friendship.id.desc())
        )
        return list(result.scalars().unique())

    def list_pending_received(self, user_id: int) -> list[Friendship]:
        result = self.session.execute(
            select(Friendship)
            .where(
                Friendship.addressee_id == user_id,
                Friendship.status == FriendshipStatus.PENDING,
            )
            .order_by(Friendship.created_at.desc(), Friendship.id.desc())
        )
        return list(result.scalars().unique())

    def counterpart_ids(self, user_id: int) -> set[int]:
        """Return ids of every user sharing a row of any status with ``user_id``."""
        result = self.session.execute(
            select(Friendship.requester_id, Friendship.addressee_id).where(
                or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id)
            )
        )
        ids: set[int] = set()
        for requester_id, addressee_id in result:
            ids.add(addressee_id if requester_id == user_id else requester_id)
        return ids
