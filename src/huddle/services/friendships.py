"""Friendship graph: request, accept, decline, cancel and remove."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.core.errors import (
    NotFoundError,
    RelationshipExistsError,
    SelfRequestError,
    TargetUnavailableError,
)
from huddle.db.time import Clock, utcnow
from huddle.models.friendship import Friendship, FriendshipStatus
from huddle.models.user import User
from huddle.repositories.friendship_repo import FriendshipRepository
from huddle.repositories.user_repo import UserRepository
from huddle.schemas.friendship import FriendRequestOut, PendingRequests
from huddle.schemas.user import UserSummary

logger = logging.getLogger(__name__)

__all__ = ["FriendshipService"]

_REQUEST_NOT_FOUND = "Friend request not found or already processed"


class FriendshipService:
    """Service owning the friend request lifecycle.

    Status changes are conditional statements, so when ``accept`` races
    ``cancel`` on the same row exactly one of them matches and the other
    raises :class:`NotFoundError`.
    """

    def __init__(self, db: Session, clock: Clock = utcnow) -> None:
        self.db = db
        self.clock = clock
        self.friendships = FriendshipRepository(db)
        self.users = UserRepository(db)

    def relationship_between(self, user_a: int, user_b: int) -> Friendship | None:
        """Return the row linking two users in either direction, or None."""
        return self.friendships.between(user_a, user_b)

    def send_request(self, from_user_id: int, to_user_id: int) -> Friendship:
        """Create a pending request from ``from_user_id`` to ``to_user_id``.

        Raises:
            SelfRequestError: If both ids are the same.
            TargetUnavailableError: If the target doesn't exist or is unverified.
            RelationshipExistsError: If any row already links the pair.
        """
        if from_user_id == to_user_id:
            raise SelfRequestError()
        if self.users.get_verified(to_user_id) is None:
            raise TargetUnavailableError()
        if self.relationship_between(from_user_id, to_user_id) is not None:
            raise RelationshipExistsError()

        friendship = Friendship.request(from_user_id, to_user_id, self.clock())
        try:
            self.friendships.add(friendship)
            self.db.commit()
        except IntegrityError as exc:
            # The opposite-direction request won the race for the pair key.
            self.db.rollback()
            logger.warning(
                "Concurrent friend request between %s and %s rejected",
                from_user_id,
                to_user_id,
            )
            raise RelationshipExistsError() from exc

        logger.info(
            "Friend request %s sent from %s to %s", friendship.id, from_user_id, to_user_id
        )
        return self._reload(friendship.id)

    def accept(self, friendship_id: int, actor_id: int) -> Friendship:
        """Accept a pending request addressed to ``actor_id``."""
        return self._respond(friendship_id, actor_id, FriendshipStatus.ACCEPTED)

    def decline(self, friendship_id: int, actor_id: int) -> Friendship:
        """Decline a pending request addressed to ``actor_id``.

        The declined row is kept, which blocks further requests between the pair.
        """
        return self._respond(friendship_id, actor_id, FriendshipStatus.DECLINED)

    def cancel(self, friendship_id: int, actor_id: int) -> None:
        """Withdraw a pending request that ``actor_id`` sent."""
        if not self.friendships.delete_pending_sent_by(friendship_id, actor_id):
            self.db.rollback()
            raise NotFoundError(_REQUEST_NOT_FOUND)
        self.db.commit()
        logger.info("Friend request %s cancelled by %s", friendship_id, actor_id)

    def remove(self, actor_id: int, other_user_id: int) -> None:
        """Unfriend: delete the accepted row between the two users."""
        friendship = self.relationship_between(actor_id, other_user_id)
        if friendship is None or not friendship.is_accepted:
            raise NotFoundError("Friendship not found or not accepted")
        friendship_id = friendship.id
        if not self.friendships.delete_accepted(friendship_id):
            self.db.rollback()
            raise NotFoundError("Friendship not found or not accepted")
        self.db.commit()
        logger.info("Friendship %s removed by %s", friendship_id, actor_id)

    def list_friends(self, user_id: int) -> list[User]:
        """Return the other party of every accepted friendship."""
        friends: list[User] = []
        for friendship in self.friendships.list_accepted_for(user_id):
            other = friendship.other_party(user_id)
            if other is not None:
                friends.append(other)
        return friends

    def list_friend_summaries(self, user_id: int) -> list[UserSummary]:
        now = self.clock()
        return [UserSummary.from_user(friend, now) for friend in self.list_friends(user_id)]

    def list_pending(self, user_id: int) -> PendingRequests:
        """Return pending requests split by direction, newest first."""
        now = self.clock()
        received = [
            FriendRequestOut(
                friendship_id=friendship.id,
                direction="received",
                status=friendship.status,
                user=UserSummary.from_user(friendship.requester, now),
                created_at=friendship.created_at,
                can_accept=True,
                can_decline=True,
            )
            for friendship in self.friendships.list_pending_received(user_id)
        ]
        sent = [
            FriendRequestOut(
                friendship_id=friendship.id,
                direction="sent",
                status=friendship.status,
                user=UserSummary.from_user(friendship.addressee, now),
                created_at=friendship.created_at,
                can_accept=False,
                can_decline=False,
            )
            for friendship in self.friendships.list_pending_sent(user_id)
        ]
        return PendingRequests(
            received=received,
            sent=sent,
            total_received=len(received),
            total_sent=len(sent),
        )

    def _respond(
        self, friendship_id: int, actor_id: int, target: FriendshipStatus
    ) -> Friendship:
        changed = self.friendships.transition(
            friendship_id,
            addressee_id=actor_id,
            target=target,
            now=self.clock(),
        )
        if not changed:
            self.db.rollback()
            raise NotFoundError(_REQUEST_NOT_FOUND)
        self.db.commit()
        logger.info("Friend request %s %s by %s", friendship_id, target.value, actor_id)
        return self._reload(friendship_id)

    def _reload(self, friendship_id: int) -> Friendship:
        friendship = self.friendships.get(friendship_id)
        if friendship is None:  # pragma: no cover - deleted between commit and read
            raise NotFoundError(_REQUEST_NOT_FOUND)
        return friendship
