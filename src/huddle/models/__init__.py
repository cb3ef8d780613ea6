# src/huddle/models/__init__.py
"""SQLAlchemy models for the Huddle messaging core."""

from .chat import Chat, ChatKind, ChatMember
from .friendship import Friendship, FriendshipStatus
from .message import Message, MessageType
from .user import User

__all__ = [
    "Chat", "ChatKind", "ChatMember",
    "Friendship", "FriendshipStatus",
    "Message", "MessageType",
    "User",
]
