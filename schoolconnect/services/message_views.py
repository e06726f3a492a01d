"""Per-viewer display filtering for scoped message lists."""
from __future__ import annotations

from enum import StrEnum
from typing import Any, Iterable, TypeVar

from ..constants import DELETED_MESSAGE_PLACEHOLDER
from ..models import MessageStatus

T = TypeVar("T")


class MessageView(StrEnum):
    ALL = "all"
    SENT = "sent"
    DRAFTS = "drafts"
    STARRED = "starred"
    TRASH = "trash"


def _status_of(message: Any) -> str:
    return str(getattr(message, "status", "") or "")


def is_visible_in_view(message: Any, viewer: str, view: str) -> bool:
    """Decide whether ``message`` belongs to ``view`` for ``viewer``.

    Works on anything exposing ``sender_username``, ``status``, ``starred`` and
    ``deleted_for``: ORM rows and API payloads alike. Unknown views show nothing.
    """

    is_deleted = viewer in (getattr(message, "deleted_for", None) or ())

    if view == MessageView.TRASH:
        return is_deleted
    if is_deleted:
        return False

    status = _status_of(message)
    is_mine = getattr(message, "sender_username", None) == viewer

    if view == MessageView.ALL:
        return status == MessageStatus.SENT
    if view == MessageView.SENT:
        return is_mine and status == MessageStatus.SENT
    if view == MessageView.DRAFTS:
        return is_mine and status == MessageStatus.DRAFT
    if view == MessageView.STARRED:
        return getattr(message, "starred", False) is True and status != MessageStatus.DRAFT
    return False


def filter_for_view(messages: Iterable[T], viewer: str, view: str) -> list[T]:
    """Return the messages shown in ``view``, preserving their order."""

    return [message for message in messages if is_visible_in_view(message, viewer, view)]


def render_text(message: Any) -> str:
    """Body to present; deleted-for-everyone messages are always redacted."""

    if _status_of(message) == MessageStatus.DELETED_EVERYONE:
        return DELETED_MESSAGE_PLACEHOLDER
    return str(getattr(message, "text", "") or "")


__all__ = ["MessageView", "is_visible_in_view", "filter_for_view", "render_text"]
