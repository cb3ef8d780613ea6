"""Domain error taxonomy.

Every failure raised by the service layer is a :class:`HuddleError` carrying a
stable ``code`` so the HTTP layer can map it to a status mechanically. ``NotFound``
deliberately covers both "row absent" and "row present but precondition not
met" so existence is not leaked across authorization boundaries.
"""
from __future__ import annotations

from enum import StrEnum

__all__ = [
    "HuddleError",
    "NotFoundError",
    "TargetUnavailableError",
    "ForbiddenError",
    "NotAllowedError",
    "SelfReferenceError",
    "SelfRequestError",
    "SelfChatError",
    "SelfReadError",
    "RelationshipExistsError",
    "ValidationReason",
    "ValidationFailedError",
    "ConflictError",
    "EmailTakenError",
]


class HuddleError(Exception):
    """Base exception for all domain failures."""

    code = "error"
    default_message = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def detail(self) -> str:
        return str(self)


class NotFoundError(HuddleError):
    code = "not_found"
    default_message = "Resource not found"


class TargetUnavailableError(NotFoundError):
    code = "target_unavailable"
    default_message = "User not found or not verified"


class ForbiddenError(HuddleError):
    code = "forbidden"
    default_message = "You are not allowed to perform this action"


class NotAllowedError(HuddleError):
    code = "not_allowed"
    default_message = "This operation is not allowed"


class SelfReferenceError(HuddleError):
    code = "self_reference"
    default_message = "You cannot target yourself"


class SelfRequestError(SelfReferenceError):
    code = "self_request"
    default_message = "You cannot send a friend request to yourself"


class SelfChatError(SelfReferenceError):
    code = "self_chat"
    default_message = "You cannot create a chat with yourself"


class SelfReadError(SelfReferenceError):
    code = "self_read"
    default_message = "You cannot mark your own message as read"


class RelationshipExistsError(HuddleError):
    code = "relationship_exists"
    default_message = "Friend request already exists or you are already friends"


class ValidationReason(StrEnum):
    """Reason codes carried by :class:`ValidationFailedError`."""

    EMPTY = "empty"
    TOO_LONG = "too_long"
    SPAM_SUSPECTED = "spam_suspected"
    INVALID_REFERENCE = "invalid_reference"
    INVALID_TYPE = "invalid_type"
    INVALID_PAGINATION = "invalid_pagination"
    INVALID_QUERY = "invalid_query"


class ValidationFailedError(HuddleError):
    """Content or argument rejected by a validation rule."""

    code = "validation_failed"
    default_message = "Validation failed"

    def __init__(
        self,
        reason: ValidationReason,
        message: str | None = None,
        *,
        rule: str | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.rule = rule


class ConflictError(HuddleError):
    code = "conflict"
    default_message = "The resource was modified concurrently"


class EmailTakenError(ConflictError):
    code = "email_taken"
    default_message = "An account with this email already exists"
