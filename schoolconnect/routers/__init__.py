"""Aggregate router exports."""
from .auth import router as auth_router
from .groups import router as groups_router
from .messages import router as messages_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "groups_router",
    "messages_router",
    "system_router",
    "users_router",
]
