"""
Pydantic schemas for service and API responses.

These schemas define the structure of data handed to the HTTP layer.
"""

from .chat import ChatStats, ChatSummary
from .common import PageMeta
from .friendship import FriendRequestOut, FriendshipOut, PendingRequests
from .message import MessageOut, MessagePage, MessageWindow
from .user import UserSearchPage, UserSearchResult, UserSummary

__all__ = [
    "ChatStats", "ChatSummary",
    "PageMeta",
    "FriendRequestOut", "FriendshipOut", "PendingRequests",
    "MessageOut", "MessagePage", "MessageWindow",
    "UserSearchPage", "UserSearchResult", "UserSummary",
]
