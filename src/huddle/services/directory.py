"""User search and friend suggestions."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from huddle.core.errors import ValidationFailedError, ValidationReason
from huddle.core.settings import settings
from huddle.db.time import Clock, utcnow
from huddle.models.friendship import Friendship
from huddle.models.user import User
from huddle.repositories.friendship_repo import FriendshipRepository
from huddle.repositories.user_repo import UserRepository
from huddle.schemas.common import PageMeta
from huddle.schemas.user import UserSearchPage, UserSearchResult, UserSummary
from huddle.services.friendships import FriendshipService

__all__ = ["UserDirectory"]


class UserDirectory:
    """Read-only lookups over verified users, annotated with friendship state."""

    def __init__(self, db: Session, clock: Clock = utcnow) -> None:
        self.clock = clock
        self.users = UserRepository(db)
        self.friendships = FriendshipRepository(db)
        self.friendship_service = FriendshipService(db, clock)

    def search(
        self,
        actor_id: int,
        query: str,
        page: int = 1,
        per_page: int | None = None,
    ) -> UserSearchPage:
        """Find verified users other than ``actor_id`` by name or email."""
        query = query.strip()
        per_page = settings.search_per_page if per_page is None else per_page
        if not settings.search_min_query <= len(query) <= settings.search_max_query:
            raise ValidationFailedError(
                ValidationReason.INVALID_QUERY,
                f"Search query must be between {settings.search_min_query} and "
                f"{settings.search_max_query} characters.",
            )
        if page < 1 or not 1 <= per_page <= settings.search_max_per_page:
            raise ValidationFailedError(
                ValidationReason.INVALID_PAGINATION,
                f"page must be >= 1 and per_page between 1 and {settings.search_max_per_page}.",
            )

        users, total = self.users.search_verified(
            exclude_id=actor_id,
            query=query,
            offset=(page - 1) * per_page,
            limit=per_page,
        )
        now = self.clock()
        items = [
            self._annotate(
                user,
                self.friendship_service.relationship_between(actor_id, user.id),
                actor_id,
                now,
            )
            for user in users
        ]
        return UserSearchPage(
            items=items,
            pagination=PageMeta.build(page=page, per_page=per_page, total=total, count=len(items)),
        )

    def suggestions(self, actor_id: int, limit: int | None = None) -> list[UserSearchResult]:
        """Return verified users with no friendship row of any status with the actor."""
        limit = settings.suggestion_limit if limit is None else limit
        if not 1 <= limit <= settings.suggestion_max_limit:
            raise ValidationFailedError(
                ValidationReason.INVALID_PAGINATION,
                f"limit must be between 1 and {settings.suggestion_max_limit}.",
            )
        excluded = self.friendships.counterpart_ids(actor_id) | {actor_id}
        now = self.clock()
        return [
            self._annotate(user, None, actor_id, now)
            for user in self.users.list_verified_excluding(excluded, limit)
        ]

    @staticmethod
    def _annotate(
        user: User,
        friendship: Friendship | None,
        actor_id: int,
        now: datetime,
    ) -> UserSearchResult:
        summary = UserSummary.from_user(user, now)
        if friendship is None:
            return UserSearchResult(**summary.model_dump())

        actionable = friendship.addressee_id == actor_id and friendship.is_pending
        return UserSearchResult(
            **summary.model_dump(),
            friendship_status=friendship.status.value,
            friendship_id=friendship.id,
            can_send_request=False,
            can_accept=actionable,
            can_decline=actionable,
        )
