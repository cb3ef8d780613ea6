# mypy: ignore-errors
# tests/test_api.py
"""Tests for the HTTP shell: health endpoints and domain error mapping."""

import pytest
from fastapi import status

from huddle.api.dependencies import (
    ChatServiceDep,
    FriendshipServiceDep,
    IdentityServiceDep,
    MessageServiceDep,
    UserDirectoryDep,
)
from huddle.core.errors import (
    ConflictError,
    ForbiddenError,
    NotAllowedError,
    NotFoundError,
    RelationshipExistsError,
    TargetUnavailableError,
    ValidationFailedError,
    ValidationReason,
)
from huddle.schemas import FriendshipOut


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_root_describes_api(client) -> None:
    data = client.get("/").json()
    assert data["name"] == "Huddle API"
    assert data["docs"] == "/docs"


@pytest.mark.parametrize(
    ("error", "expected_status", "expected_code"),
    [
        (NotFoundError(), status.HTTP_404_NOT_FOUND, "not_found"),
        (TargetUnavailableError(), status.HTTP_404_NOT_FOUND, "target_unavailable"),
        (ForbiddenError(), status.HTTP_403_FORBIDDEN, "forbidden"),
        (NotAllowedError(), status.HTTP_400_BAD_REQUEST, "not_allowed"),
        (RelationshipExistsError(), status.HTTP_400_BAD_REQUEST, "relationship_exists"),
        (ConflictError(), status.HTTP_409_CONFLICT, "conflict"),
    ],
)
def test_domain_errors_map_to_status(app, client, error, expected_status, expected_code) -> None:
    @app.get("/raise")
    def _raise() -> None:
        raise error

    response = client.get("/raise")

    assert response.status_code == expected_status
    assert response.json() == {"detail": str(error), "code": expected_code}


def test_validation_error_body_carries_reason_and_rule(app, client) -> None:
    @app.get("/spam")
    def _spam() -> None:
        raise ValidationFailedError(
            ValidationReason.SPAM_SUSPECTED, "Looks like spam", rule="spam_phrase"
        )

    response = client.get("/spam")

    assert response.status_code == 422
    assert response.json() == {
        "detail": "Looks like spam",
        "code": "validation_failed",
        "reason": "spam_suspected",
        "rule": "spam_phrase",
    }


def test_services_resolve_through_dependencies(app, client, alice, bob, carol) -> None:
    """Routes built on the dependency aliases share the request session and clock."""

    @app.post("/chats/{user_a}/{user_b}")
    def open_chat(user_a: int, user_b: int, chats: ChatServiceDep) -> dict:
        return {"id": chats.create_private(user_a, user_b).id}

    @app.post("/chats/{chat_id}/messages/{sender_id}")
    def post_message(chat_id: int, sender_id: int, ledger: MessageServiceDep) -> dict:
        return {"content": ledger.append(chat_id, sender_id, "<b>hi</b> there").content}

    created = client.post(f"/chats/{alice.id}/{bob.id}")
    assert created.status_code == status.HTTP_200_OK
    chat_id = created.json()["id"]
    assert client.post(f"/chats/{bob.id}/{alice.id}").json()["id"] == chat_id

    self_chat = client.post(f"/chats/{alice.id}/{alice.id}")
    assert self_chat.status_code == status.HTTP_400_BAD_REQUEST
    assert self_chat.json()["code"] == "self_chat"

    assert client.post(f"/chats/{chat_id}/messages/{bob.id}").json() == {"content": "hi there"}
    outsider = client.post(f"/chats/{chat_id}/messages/{carol.id}")
    assert outsider.status_code == status.HTTP_403_FORBIDDEN


def test_friendship_routes_resolve_through_dependencies(app, client, make_user, alice) -> None:
    dave = make_user("Dave", verified=False)

    @app.post("/friends/{from_id}/{to_id}", response_model=FriendshipOut)
    def befriend(from_id: int, to_id: int, friendships: FriendshipServiceDep):
        return friendships.send_request(from_id, to_id)

    @app.post("/users/{user_id}/verify")
    def verify(user_id: int, identity: IdentityServiceDep) -> dict:
        return {"changed": identity.mark_verified(user_id)}

    @app.get("/users/{user_id}/search")
    def search(user_id: int, q: str, directory: UserDirectoryDep) -> dict:
        return directory.search(user_id, q).model_dump(mode="json")

    unavailable = client.post(f"/friends/{alice.id}/{dave.id}")
    assert unavailable.status_code == status.HTTP_404_NOT_FOUND
    assert unavailable.json()["code"] == "target_unavailable"

    assert client.post(f"/users/{dave.id}/verify").json() == {"changed": True}

    created = client.post(f"/friends/{alice.id}/{dave.id}")
    assert created.status_code == status.HTTP_200_OK
    body = created.json()
    assert body["requester_id"] == alice.id
    assert body["addressee_id"] == dave.id
    assert body["status"] == "pending"

    found = client.get(f"/users/{alice.id}/search", params={"q": "dav"}).json()
    assert found["items"][0]["friendship_status"] == "pending"
    assert found["items"][0]["friendship_id"] == body["id"]
