"""Convenience exports for service layer."""
from .auth_service import (
    authenticate_user,
    close_session,
    contact_address_for,
    decode_access_token,
    get_current_session,
    get_current_user,
    open_session,
    register_user,
    require_admin,
    set_user_role,
)
from .conversation_scope import ContextKind, ConversationContext
from .delivery_watcher import (
    DeliveryBatch,
    DeliveryCategory,
    DeliveryCursor,
    DeliveryEvent,
    collect_updates,
    current_cursor,
    preview_text,
)
from .message_service import (
    create_group,
    create_message,
    get_group,
    list_accounts,
    list_groups,
    patch_message,
    query_messages,
)
from .message_views import MessageView, filter_for_view, is_visible_in_view, render_text

__all__ = [
    "authenticate_user",
    "close_session",
    "contact_address_for",
    "decode_access_token",
    "get_current_session",
    "get_current_user",
    "open_session",
    "register_user",
    "require_admin",
    "set_user_role",
    "ContextKind",
    "ConversationContext",
    "DeliveryBatch",
    "DeliveryCategory",
    "DeliveryCursor",
    "DeliveryEvent",
    "collect_updates",
    "current_cursor",
    "preview_text",
    "create_group",
    "create_message",
    "get_group",
    "list_accounts",
    "list_groups",
    "patch_message",
    "query_messages",
    "MessageView",
    "filter_for_view",
    "is_visible_in_view",
    "render_text",
]
