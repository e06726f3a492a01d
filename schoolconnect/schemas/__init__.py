"""Convenience exports for schema layer."""
from .auth import (
    AccountResponse,
    LoginRequest,
    LoginResponse,
    MessageOnlyResponse,
    RegisterRequest,
    RegisterResponse,
    RoleUpdateRequest,
    UserSummary,
)
from .messages import (
    DeliveryEventResponse,
    DeliveryUpdatesResponse,
    GroupCreateRequest,
    GroupResponse,
    MessageCreateRequest,
    MessageListResponse,
    MessagePatchRequest,
    MessageResponse,
)

__all__ = [
    "AccountResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageOnlyResponse",
    "RegisterRequest",
    "RegisterResponse",
    "RoleUpdateRequest",
    "UserSummary",
    "DeliveryEventResponse",
    "DeliveryUpdatesResponse",
    "GroupCreateRequest",
    "GroupResponse",
    "MessageCreateRequest",
    "MessageListResponse",
    "MessagePatchRequest",
    "MessageResponse",
]
