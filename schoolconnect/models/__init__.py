"""Convenience exports for ORM models."""
from .associations import GroupMember, MessageDeletion
from .group_chat import GroupChat
from .message import Message, MessageStatus
from .session import UserSession
from .user import User

__all__ = [
    "GroupChat",
    "GroupMember",
    "Message",
    "MessageDeletion",
    "MessageStatus",
    "User",
    "UserSession",
]
