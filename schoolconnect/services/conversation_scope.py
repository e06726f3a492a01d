"""Conversation scoping: which stored messages belong to a requested context.

Every read of the message store goes through the clauses built here, so this
module is the single place deciding what exists in a conversation:

* ``global``  messages with neither a recipient nor a group.
* ``private`` messages exchanged between the viewer and one peer, both directions.
* ``group``   messages addressed to one group.

Drafts are only ever visible to their author, whatever the context.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable

from fastapi import HTTPException, status
from sqlalchemy import Select, and_, false, or_, select
from sqlalchemy.sql.elements import ColumnElement

from ..models import Message, MessageStatus


class ContextKind(StrEnum):
    GLOBAL = "global"
    PRIVATE = "private"
    GROUP = "group"


@dataclass(frozen=True, slots=True)
class ConversationContext:
    """The addressing scope of a conversation."""

    kind: ContextKind
    peer: str | None = None
    group_id: int | None = None

    @classmethod
    def global_channel(cls) -> "ConversationContext":
        return cls(ContextKind.GLOBAL)

    @classmethod
    def private(cls, peer: str) -> "ConversationContext":
        return cls(ContextKind.PRIVATE, peer=peer)

    @classmethod
    def group(cls, group_id: int) -> "ConversationContext":
        return cls(ContextKind.GROUP, group_id=group_id)

    @classmethod
    def from_params(cls, context: str | None, *, peer: str | None = None, group_id: int | None = None) -> "ConversationContext":
        """Build a context from loosely typed request parameters.

        When ``context`` is omitted it is inferred from whichever of ``peer`` or
        ``group_id`` is present, defaulting to the global channel.
        """

        peer = (peer or "").strip() or None
        raw = (context or "").strip().lower()
        if not raw:
            if peer and group_id is not None:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Choose either a peer or a group, not both")
            if peer:
                raw = ContextKind.PRIVATE
            elif group_id is not None:
                raw = ContextKind.GROUP
            else:
                raw = ContextKind.GLOBAL

        try:
            kind = ContextKind(raw)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown conversation context '{raw}'") from exc

        if kind is ContextKind.PRIVATE:
            if not peer:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A private conversation needs a peer")
            return cls.private(peer)
        if kind is ContextKind.GROUP:
            if group_id is None:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A group conversation needs a group_id")
            return cls.group(group_id)
        return cls.global_channel()


def context_clause(context: ConversationContext, viewer: str) -> ColumnElement[bool]:
    """Return the filter selecting the messages addressed within ``context``."""

    if context.kind is ContextKind.PRIVATE:
        return or_(
            and_(Message.sender_username == viewer, Message.recipient_username == context.peer),
            and_(Message.sender_username == context.peer, Message.recipient_username == viewer),
        )
    if context.kind is ContextKind.GROUP:
        return Message.group_id == context.group_id
    return and_(Message.recipient_username.is_(None), Message.group_id.is_(None))


def visibility_clause(viewer: str) -> ColumnElement[bool]:
    """Drafts are only visible to their author."""

    return or_(Message.status != MessageStatus.DRAFT.value, Message.sender_username == viewer)


def scoped_messages_query(context: ConversationContext, viewer: str) -> Select:
    """Ordered query for the messages ``viewer`` can see in ``context``.

    Ordering is oldest first; messages sharing a timestamp keep insertion order.
    """

    return (
        select(Message)
        .where(context_clause(context, viewer), visibility_clause(viewer))
        .order_by(Message.created_at.asc(), Message.id.asc())
    )


def inbox_clause(viewer: str, group_ids: Iterable[int]) -> ColumnElement[bool]:
    """Union of every context ``viewer`` takes part in."""

    member_of = list(group_ids)
    return and_(
        or_(
            context_clause(ConversationContext.global_channel(), viewer),
            Message.sender_username == viewer,
            Message.recipient_username == viewer,
            Message.group_id.in_(member_of) if member_of else false(),
        ),
        visibility_clause(viewer),
    )


def context_of(message: Message) -> ConversationContext:
    """Classify a stored message back into the context it was addressed to."""

    if message.group_id is not None:
        return ConversationContext.group(message.group_id)
    if message.recipient_username:
        return ConversationContext.private(message.recipient_username)
    return ConversationContext.global_channel()


__all__ = [
    "ContextKind",
    "ConversationContext",
    "context_clause",
    "visibility_clause",
    "scoped_messages_query",
    "inbox_clause",
    "context_of",
]
