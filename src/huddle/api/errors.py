"""Mapping of domain errors onto HTTP responses."""
from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from huddle.core.errors import (
    ConflictError,
    EmailTakenError,
    ForbiddenError,
    HuddleError,
    NotAllowedError,
    NotFoundError,
    RelationshipExistsError,
    SelfChatError,
    SelfReadError,
    SelfReferenceError,
    SelfRequestError,
    TargetUnavailableError,
    ValidationFailedError,
)

STATUS_BY_CODE: dict[str, int] = {
    NotFoundError.code: status.HTTP_404_NOT_FOUND,
    TargetUnavailableError.code: status.HTTP_404_NOT_FOUND,
    ForbiddenError.code: status.HTTP_403_FORBIDDEN,
    NotAllowedError.code: status.HTTP_400_BAD_REQUEST,
    SelfReferenceError.code: status.HTTP_400_BAD_REQUEST,
    SelfRequestError.code: status.HTTP_400_BAD_REQUEST,
    SelfChatError.code: status.HTTP_400_BAD_REQUEST,
    SelfReadError.code: status.HTTP_400_BAD_REQUEST,
    RelationshipExistsError.code: status.HTTP_400_BAD_REQUEST,
    ValidationFailedError.code: 422,
    ConflictError.code: status.HTTP_409_CONFLICT,
    EmailTakenError.code: status.HTTP_409_CONFLICT,
}


def status_for(exc: HuddleError) -> int:
    """Return the HTTP status for a domain error."""
    return STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)


def error_body(exc: HuddleError) -> dict[str, Any]:
    body: dict[str, Any] = {"detail": exc.detail, "code": exc.code}
    if isinstance(exc, ValidationFailedError):
        body["reason"] = exc.reason.value
        if exc.rule is not None:
            body["rule"] = exc.rule
    return body


async def handle_domain_error(request: Request, exc: HuddleError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content=error_body(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handler on ``app``."""
    app.add_exception_handler(HuddleError, handle_domain_error)  # type: ignore[arg-type]
