"""Data access helpers for working with users."""
from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from huddle.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_verified(self, user_id: int) -> User | None:
        """Return the user only if their email address has been confirmed."""
        result = self.session.execute(
            select(User).where(User.id == user_id, User.email_verified_at.is_not(None))
        )
        return result.scalars().first()

    def get_by_email(self, email: str) -> User | None:
        result = self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalars().first()

    def existing_ids(self, user_ids: Collection[int]) -> set[int]:
        if not user_ids:
            return set()
        result = self.session.execute(select(User.id).where(User.id.in_(user_ids)))
        return set(result.scalars())

    def add(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user

    def search_verified(
        self,
        *,
        exclude_id: int,
        query: str,
        offset: int,
        limit: int,
    ) -> tuple[list[User], int]:
        """Return verified users matching ``query`` in name or email, plus the total."""
        pattern = f"%{query.lower()}%"
        criteria = (
            User.id != exclude_id,
            User.email_verified_at.is_not(None),
            or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)),
        )
        total = self.session.execute(
            select(func.count()).select_from(User).where(*criteria)
        ).scalar_one()
        result = self.session.execute(
            select(User).where(*criteria).order_by(User.name, User.id).offset(offset).limit(limit)
        )
        return list(result.scalars()), total

    def list_verified_excluding(self, exclude_ids: Collection[int], limit: int) -> list[User]:
        """Return verified users not in ``exclude_ids``, most recently seen first."""
        stmt = select(User).where(User.email_verified_at.is_not(None))
        if exclude_ids:
            stmt = stmt.where(User.id.not_in(exclude_ids))
        stmt = stmt.order_by(User.last_seen_at.desc().nulls_last(), User.id).limit(limit)
        return list(self.session.execute(stmt).scalars())
