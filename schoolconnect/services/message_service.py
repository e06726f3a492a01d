"""Messaging domain services: message write/update paths, groups and the directory."""
from __future__ import annotations

import logging
from typing import Sequence

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import GROUP_ROLE_ADMIN, GROUP_ROLE_MEMBER
from ..models import GroupChat, GroupMember, Message, MessageDeletion, MessageStatus, User
from ..schemas import GroupCreateRequest, MessageCreateRequest
from .conversation_scope import ContextKind, ConversationContext, context_of, scoped_messages_query

logger = logging.getLogger(__name__)

# Allowed status changes when strict transitions are enabled; identity is always allowed.
STATUS_TRANSITIONS: dict[MessageStatus, frozenset[MessageStatus]] = {
    MessageStatus.DRAFT: frozenset({MessageStatus.SENT, MessageStatus.DELETED_EVERYONE}),
    MessageStatus.SENT: frozenset({MessageStatus.DELETED_EVERYONE}),
    MessageStatus.DELETED_EVERYONE: frozenset(),
}


def list_accounts(db: Session) -> list[User]:
    """Return every account ordered by handle."""

    return list(db.scalars(select(User).order_by(User.username.asc())))


def _require_account(db: Session, username: str) -> User:
    user = db.scalar(select(User).where(User.username == username))
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User '{username}' not found")
    return user


def _load_group(db: Session, group_id: int) -> GroupChat:
    group = db.get(GroupChat, group_id)
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return group


def _ensure_group_membership(group: GroupChat, username: str) -> None:
    if not group.has_member(username):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not part of this group")


def _collect_unique_usernames(creator: str, extras: Sequence[str] | None) -> list[str]:
    candidates: list[str] = []
    for raw in [creator, *(extras or [])]:
        username = (raw or "").strip()
        if username and username not in candidates:
            candidates.append(username)
    return candidates


def create_group(db: Session, creator: User, payload: GroupCreateRequest) -> GroupChat:
    """Create a group seeded with the creator (sole admin) and the invitees."""

    usernames = _collect_unique_usernames(creator.username, payload.members)
    for username in usernames[1:]:
        _require_account(db, username)

    group = GroupChat(name=payload.name.strip(), created_by=creator.username)
    group.memberships = [
        GroupMember(username=username, role=GROUP_ROLE_ADMIN if username == creator.username else GROUP_ROLE_MEMBER)
        for username in usernames
    ]

    try:
        db.add(group)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create group %r", payload.name)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create group") from exc

    db.refresh(group)
    logger.info("Group %s (%r) created by %s with %d members", group.id, group.name, creator.username, len(usernames))
    return group


def list_groups(db: Session, *, viewer: str) -> list[GroupChat]:
    stmt = (
        select(GroupChat)
        .join(GroupMember, GroupMember.group_id == GroupChat.id)
        .where(GroupMember.username == viewer)
        .order_by(GroupChat.created_at.desc(), GroupChat.id.desc())
    )
    return list(db.scalars(stmt))


def member_group_ids(db: Session, *, viewer: str) -> list[int]:
    stmt = select(GroupMember.group_id).where(GroupMember.username == viewer)
    return list(db.scalars(stmt))


def get_group(db: Session, *, group_id: int, viewer: str) -> GroupChat:
    group = _load_group(db, group_id)
    if not group.has_member(viewer):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return group


def _check_context_access(db: Session, context: ConversationContext, viewer: str) -> None:
    if context.kind is ContextKind.PRIVATE:
        _require_account(db, context.peer or "")
    elif context.kind is ContextKind.GROUP:
        _ensure_group_membership(_load_group(db, context.group_id or 0), viewer)


def create_message(db: Session, *, sender: User, payload: MessageCreateRequest) -> Message:
    """Persist a message in the context its addressing selects.

    Posting to the global channel requires the admin role. Anything else is
    accepted as long as the addressed peer or group exists.
    """

    if payload.group_id is not None:
        context = ConversationContext.group(payload.group_id)
    elif payload.recipient:
        context = ConversationContext.private(payload.recipient.strip())
    else:
        context = ConversationContext.global_channel()

    if context.kind is ContextKind.GLOBAL and not sender.is_admin:
        logger.info("Rejected global post from non-admin %s", sender.username)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only administrators can post to the global channel")
    _check_context_access(db, context, sender.username)

    message = Message(
        sender_username=sender.username,
        sender_id=sender.id,
        text=payload.text,
        status=(payload.status or MessageStatus.SENT).value,
        recipient_username=context.peer,
        group_id=context.group_id,
    )

    try:
        db.add(message)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist message from %s", sender.username)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send message") from exc

    db.refresh(message)
    return message


def query_messages(db: Session, *, viewer: str, context: ConversationContext) -> list[Message]:
    """Return the messages ``viewer`` can see in ``context``, oldest first."""

    _check_context_access(db, context, viewer)
    return list(db.scalars(scoped_messages_query(context, viewer)))


def _load_visible_message(db: Session, message_id: int, viewer: str) -> Message:
    message = db.get(Message, message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    if message.status == MessageStatus.DRAFT and message.sender_username != viewer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")

    context = context_of(message)
    if context.kind is ContextKind.PRIVATE and viewer not in {message.sender_username, message.recipient_username}:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    if context.kind is ContextKind.GROUP:
        group = db.get(GroupChat, context.group_id)
        if group is None or not group.has_member(viewer):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message


def _check_transition(current: str, requested: MessageStatus) -> None:
    try:
        current_status = MessageStatus(current)
    except ValueError:
        return
    if requested == current_status or requested in STATUS_TRANSITIONS[current_status]:
        return
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"A {current_status.value} message cannot become {requested.value}",
    )


def patch_message(
    db: Session,
    *,
    message_id: int,
    viewer: str,
    add_deleted_for: str | None = None,
    starred: bool | None = None,
    new_status: MessageStatus | None = None,
) -> Message:
    """Apply a partial update to one message.

    The soft delete for a viewer and the field replacement are two separate
    steps applied in the same transaction. Adding a handle that already hid the
    message is a no-op.
    """

    message = _load_visible_message(db, message_id, viewer)

    if new_status is not None and get_settings().strict_status_transitions:
        _check_transition(message.status, new_status)

    try:
        if add_deleted_for and db.get(MessageDeletion, (message_id, add_deleted_for)) is None:
            db.add(MessageDeletion(message_id=message_id, username=add_deleted_for))
            try:
                db.flush()
            except IntegrityError:
                # Hidden by a concurrent request in the meantime.
                db.rollback()
                logger.debug("Message %s already hidden for %s", message_id, add_deleted_for)

        values: dict[str, object] = {}
        if starred is not None:
            values["starred"] = starred
        if new_status is not None:
            values["status"] = new_status.value
        if values:
            db.execute(update(Message).where(Message.id == message_id).values(**values))

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update message %s", message_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update message") from exc

    db.refresh(message)
    db.refresh(message, attribute_names=["deletions"])
    return message


__all__ = [
    "STATUS_TRANSITIONS",
    "list_accounts",
    "create_group",
    "list_groups",
    "member_group_ids",
    "get_group",
    "create_message",
    "query_messages",
    "patch_message",
]
