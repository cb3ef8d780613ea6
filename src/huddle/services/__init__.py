"""Service layer for the Huddle messaging core."""

from .chats import ChatService
from .content_policy import ContentPolicy, SpamRule
from .directory import UserDirectory
from .friendships import FriendshipService
from .identity import IdentityService
from .messages import MessageService

__all__ = [
    "ChatService",
    "ContentPolicy",
    "SpamRule",
    "UserDirectory",
    "FriendshipService",
    "IdentityService",
    "MessageService",
]
