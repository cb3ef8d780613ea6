"""Huddle: friendships, chats and messages for a small social app."""

__version__ = "0.1.0"
