# tests/test_friendships.py
"""Tests for the friend request lifecycle."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from huddle.core.errors import (
    NotFoundError,
    RelationshipExistsError,
    SelfRequestError,
    TargetUnavailableError,
)
from huddle.models import Friendship, FriendshipStatus
from huddle.services import FriendshipService


@pytest.fixture()
def service(db_session, clock) -> FriendshipService:
    return FriendshipService(db_session, clock)


def _row_count(db_session) -> int:
    return db_session.execute(select(func.count()).select_from(Friendship)).scalar_one()


def test_send_request_creates_pending_row(service, alice, bob) -> None:
    friendship = service.send_request(alice.id, bob.id)

    assert friendship.status == FriendshipStatus.PENDING
    assert friendship.requester_id == alice.id
    assert friendship.addressee_id == bob.id
    assert service.relationship_between(alice.id, bob.id).id == friendship.id
    assert service.relationship_between(bob.id, alice.id).id == friendship.id


def test_cannot_befriend_self(service, alice) -> None:
    with pytest.raises(SelfRequestError):
        service.send_request(alice.id, alice.id)


def test_target_must_exist_and_be_verified(service, make_user, alice) -> None:
    pending_signup = make_user("Dave", verified=False)

    with pytest.raises(TargetUnavailableError):
        service.send_request(alice.id, pending_signup.id)
    with pytest.raises(TargetUnavailableError):
        service.send_request(alice.id, 999_999)


def test_second_request_rejected_in_either_direction(service, db_session, alice, bob) -> None:
    service.send_request(alice.id, bob.id)

    with pytest.raises(RelationshipExistsError):
        service.send_request(alice.id, bob.id)
    with pytest.raises(RelationshipExistsError):
        service.send_request(bob.id, alice.id)
    assert _row_count(db_session) == 1


def test_concurrent_opposite_requests_leave_one_row(
    service, db_session, monkeypatch, alice, bob
) -> None:
    """A request that slips past the pre-check is stopped by the pair constraint."""
    service.send_request(bob.id, alice.id)
    monkeypatch.setattr(service, "relationship_between", lambda a, b: None)

    with pytest.raises(RelationshipExistsError):
        service.send_request(alice.id, bob.id)
    assert _row_count(db_session) == 1


def test_accept_by_addressee(service, alice, bob) -> None:
    request = service.send_request(alice.id, bob.id)

    accepted = service.accept(request.id, bob.id)

    assert accepted.status == FriendshipStatus.ACCEPTED
    assert [u.id for u in service.list_friends(alice.id)] == [bob.id]
    assert [u.id for u in service.list_friends(bob.id)] == [alice.id]


def test_requester_cannot_accept_own_request(service, alice, bob) -> None:
    request = service.send_request(alice.id, bob.id)

    with pytest.raises(NotFoundError):
        service.accept(request.id, alice.id)
    assert service.relationship_between(alice.id, bob.id).status == FriendshipStatus.PENDING


def test_accept_is_not_repeatable(service, alice, bob) -> None:
    request = service.send_request(alice.id, bob.id)
    service.accept(request.id, bob.id)

    with pytest.raises(NotFoundError):
        service.accept(request.id, bob.id)
    with pytest.raises(NotFoundError):
        service.decline(request.id, bob.id)


def test_declined_is_terminal_and_blocks_new_requests(service, alice, bob) -> None:
    request = service.send_request(alice.id, bob.id)
    declined = service.decline(request.id, bob.id)
    assert declined.status == FriendshipStatus.DECLINED

    with pytest.raises(NotFoundError):
        service.accept(request.id, bob.id)
    with pytest.raises(RelationshipExistsError):
        service.send_request(alice.id, bob.id)
    with pytest.raises(RelationshipExistsError):
        service.send_request(bob.id, alice.id)


def test_cancel_by_requester_deletes_row(service, db_session, alice, bob) -> None:
    request = service.send_request(alice.id, bob.id)

    with pytest.raises(NotFoundError):
        service.cancel(request.id, bob.id)

    service.cancel(request.id, alice.id)
    assert service.relationship_between(alice.id, bob.id) is None
    assert _row_count(db_session) == 0
    # A cancelled request frees the pair for a new one.
    assert service.send_request(bob.id, alice.id).requester_id == bob.id


def test_accept_then_cancel_fails(service, alice, bob) -> None:
    request = service.send_request(alice.id, bob.id)
    service.accept(request.id, bob.id)

    with pytest.raises(NotFoundError):
        service.cancel(request.id, alice.id)
    assert service.relationship_between(alice.id, bob.id).status == FriendshipStatus.ACCEPTED


def test_cancel_then_accept_fails(service, alice, bob) -> None:
    request_id = service.send_request(alice.id, bob.id).id
    service.cancel(request_id, alice.id)

    with pytest.raises(NotFoundError):
        service.accept(request_id, bob.id)
    with pytest.raises(NotFoundError):
        service.decline(request_id, bob.id)


def test_remove_accepted_friendship_from_either_side(service, alice, bob, carol) -> None:
    first = service.send_request(alice.id, bob.id)
    service.accept(first.id, bob.id)
    second = service.send_request(carol.id, alice.id)
    service.accept(second.id, alice.id)

    service.remove(bob.id, alice.id)
    service.remove(alice.id, carol.id)

    assert service.list_friends(alice.id) == []
    assert service.relationship_between(alice.id, bob.id) is None


def test_remove_requires_accepted_friendship(service, alice, bob, carol) -> None:
    service.send_request(alice.id, bob.id)

    with pytest.raises(NotFoundError):
        service.remove(alice.id, bob.id)
    with pytest.raises(NotFoundError):
        service.remove(alice.id, carol.id)


def test_list_pending_split_by_direction_newest_first(service, clock, alice, bob, carol) -> None:
    older = service.send_request(bob.id, alice.id)
    clock.advance(minutes=1)
    newer = service.send_request(carol.id, alice.id)

    pending = service.list_pending(alice.id)

    assert [r.friendship_id for r in pending.received] == [newer.id, older.id]
    assert pending.total_received == 2
    assert pending.sent == []
    assert all(r.can_accept and r.can_decline for r in pending.received)
    assert pending.received[0].user.id == carol.id

    sent = service.list_pending(carol.id)
    assert sent.total_sent == 1
    assert sent.sent[0].direction == "sent"
    assert sent.sent[0].user.id == alice.id
    assert not sent.sent[0].can_accept


def test_friend_summaries_include_presence(service, clock, make_user, alice) -> None:
    online = make_user("Olive", last_seen_at=clock())
    offline = make_user("Otto")
    for friend in (online, offline):
        request = service.send_request(alice.id, friend.id)
        service.accept(request.id, friend.id)

    summaries = {s.name: s for s in service.list_friend_summaries(alice.id)}

    assert summaries["Olive"].is_online is True
    assert summaries["Otto"].is_online is False
