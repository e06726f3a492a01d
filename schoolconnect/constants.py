"""Project-wide constant values."""
from __future__ import annotations

ROLE_USER = "user"
ROLE_ADMIN = "admin"

GROUP_ROLE_ADMIN = "admin"
GROUP_ROLE_MEMBER = "member"

DELETED_MESSAGE_PLACEHOLDER = "Message deleted"  # shown instead of the body of deleted-for-everyone messages

SERVER_UNREACHABLE_NOTICE = "Could not reach the server. Check that it is running and try again."

__all__ = [
    "ROLE_USER",
    "ROLE_ADMIN",
    "GROUP_ROLE_ADMIN",
    "GROUP_ROLE_MEMBER",
    "DELETED_MESSAGE_PLACEHOLDER",
    "SERVER_UNREACHABLE_NOTICE",
]
