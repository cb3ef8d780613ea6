"""FastAPI dependencies for routers built on the service layer."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from huddle.db.session import get_db
from huddle.db.time import Clock, utcnow
from huddle.services import (
    ChatService,
    FriendshipService,
    IdentityService,
    MessageService,
    UserDirectory,
)


def get_clock() -> Clock:
    """Return the time source; override in tests for deterministic timestamps."""
    return utcnow


SessionDep = Annotated[Session, Depends(get_db)]
ClockDep = Annotated[Clock, Depends(get_clock)]


def get_identity_service(db: SessionDep, clock: ClockDep) -> IdentityService:
    return IdentityService(db, clock)


def get_friendship_service(db: SessionDep, clock: ClockDep) -> FriendshipService:
    return FriendshipService(db, clock)


def get_chat_service(db: SessionDep, clock: ClockDep) -> ChatService:
    return ChatService(db, clock)


def get_message_service(db: SessionDep, clock: ClockDep) -> MessageService:
    return MessageService(db, clock)


def get_user_directory(db: SessionDep, clock: ClockDep) -> UserDirectory:
    return UserDirectory(db, clock)


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
FriendshipServiceDep = Annotated[FriendshipService, Depends(get_friendship_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
MessageServiceDep = Annotated[MessageService, Depends(get_message_service)]
UserDirectoryDep = Annotated[UserDirectory, Depends(get_user_directory)]
