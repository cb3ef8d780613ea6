"""Query helpers wrapping the SQLAlchemy session for each aggregate."""

from .chat_repo import ChatRepository
from .friendship_repo import FriendshipRepository
from .message_repo import MessageRepository
from .user_repo import UserRepository

__all__ = [
    "ChatRepository",
    "FriendshipRepository",
    "MessageRepository",
    "UserRepository",
]
