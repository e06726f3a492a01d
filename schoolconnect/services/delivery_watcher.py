"""Detection of newly visible messages and groups for a polling viewer."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models import GroupChat, GroupMember, Message, MessageStatus
from .conversation_scope import ContextKind, context_of, inbox_clause
from .message_service import member_group_ids


class DeliveryCategory(StrEnum):
    GLOBAL = "global"
    PRIVATE = "private"
    GROUP = "group"
    GROUP_ADDED = "group_added"


@dataclass(frozen=True, slots=True)
class DeliveryCursor:
    """Highest message and group ids a viewer has already been told about."""

    message: int = 0
    group: int = 0


@dataclass(frozen=True, slots=True)
class DeliveryEvent:
    category: DeliveryCategory
    title: str
    preview: str | None = None
    sender: str | None = None
    message_id: int | None = None
    group_id: int | None = None


@dataclass(slots=True)
class DeliveryBatch:
    cursor: DeliveryCursor
    events: list[DeliveryEvent] = field(default_factory=list)


def preview_text(text: str | None, limit: int | None = None) -> str:
    """Return the first ``limit`` characters of ``text``, with ``...`` when cut."""

    limit = limit if limit is not None else get_settings().preview_length
    body = text or ""
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


def current_cursor(db: Session, *, viewer: str) -> DeliveryCursor:
    group_ids = member_group_ids(db, viewer=viewer)
    last_message = db.scalar(select(func.max(Message.id)).where(inbox_clause(viewer, group_ids)))
    last_group = db.scalar(
        select(func.max(GroupChat.id))
        .join(GroupMember, GroupMember.group_id == GroupChat.id)
        .where(GroupMember.username == viewer)
    )
    return DeliveryCursor(message=int(last_message or 0), group=int(last_group or 0))


def _message_event(message: Message) -> DeliveryEvent:
    context = context_of(message)
    if context.kind is ContextKind.GROUP:
        group_name = message.group.name if message.group is not None else f"#{message.group_id}"
        category = DeliveryCategory.GROUP
        title = f"{message.sender_username} in {group_name}"
    elif context.kind is ContextKind.PRIVATE:
        category = DeliveryCategory.PRIVATE
        title = f"Private message from {message.sender_username}"
    else:
        category = DeliveryCategory.GLOBAL
        title = f"New announcement from {message.sender_username}"
    return DeliveryEvent(
        category=category,
        title=title,
        preview=preview_text(message.text),
        sender=message.sender_username,
        message_id=message.id,
        group_id=message.group_id,
    )


def collect_updates(db: Session, *, viewer: str, cursor: DeliveryCursor | None) -> DeliveryBatch:
    """Return the events a viewer has not seen since ``cursor``.

    Without a cursor (first poll) only the current position is returned so
    existing history does not raise a burst of notifications. Items authored by
    the viewer and anything that is not a sent message never produce an event.
    """

    if cursor is None:
        return DeliveryBatch(cursor=current_cursor(db, viewer=viewer))

    events: list[DeliveryEvent] = []

    group_ids = member_group_ids(db, viewer=viewer)
    new_messages = db.scalars(
        select(Message)
        .where(inbox_clause(viewer, group_ids), Message.id > cursor.message)
        .order_by(Message.id.asc())
    )
    last_message = cursor.message
    for message in new_messages:
        last_message = max(last_message, message.id)
        if message.sender_username == viewer:
            continue
        if message.status != MessageStatus.SENT:
            continue
        events.append(_message_event(message))

    new_groups = db.scalars(
        select(GroupChat)
        .join(GroupMember, GroupMember.group_id == GroupChat.id)
        .where(GroupMember.username == viewer, GroupChat.id > cursor.group)
        .order_by(GroupChat.id.asc())
    )
    last_group = cursor.group
    for group in new_groups:
        last_group = max(last_group, group.id)
        if group.created_by == viewer:
            continue
        events.append(
            DeliveryEvent(
                category=DeliveryCategory.GROUP_ADDED,
                title=f"{group.created_by} added you to {group.name}",
                sender=group.created_by,
                group_id=group.id,
            )
        )

    return DeliveryBatch(cursor=DeliveryCursor(message=last_message, group=last_group), events=events)


__all__ = [
    "DeliveryCategory",
    "DeliveryCursor",
    "DeliveryEvent",
    "DeliveryBatch",
    "preview_text",
    "current_cursor",
    "collect_updates",
]
