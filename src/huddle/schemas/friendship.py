"""Friendship-related Pydantic schemas."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from huddle.models.friendship import FriendshipStatus
from huddle.schemas.common import UtcDatetime
from huddle.schemas.user import UserSummary


class FriendshipOut(BaseModel):
    """Raw friendship row."""

    id: int
    requester_id: int
    addressee_id: int
    status: FriendshipStatus
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class FriendRequestOut(BaseModel):
    """A pending request seen from one side of the pair."""

    friendship_id: int
    direction: Literal["sent", "received"]
    status: FriendshipStatus
    user: UserSummary
    created_at: UtcDatetime
    can_accept: bool
    can_decline: bool


class PendingRequests(BaseModel):
    received: list[FriendRequestOut]
    sent: list[FriendRequestOut]
    total_received: int
    total_sent: int
