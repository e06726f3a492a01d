"""Messaging API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import Message, MessageStatus, User
from ..schemas import (
    DeliveryEventResponse,
    DeliveryUpdatesResponse,
    MessageCreateRequest,
    MessageListResponse,
    MessagePatchRequest,
    MessageResponse,
)
from ..services import (
    ConversationContext,
    DeliveryCursor,
    collect_updates,
    current_cursor,
    create_message,
    filter_for_view,
    get_current_user,
    patch_message,
    query_messages,
    render_text,
)

router = APIRouter(prefix="/api/messages", tags=["messages"])


def _to_message_response(message: Message) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        sender_username=message.sender_username,
        sender_id=message.sender_id,
        text=render_text(message),
        status=message.status,
        starred=bool(message.starred),
        deleted_for=message.deleted_for,
        recipient_username=message.recipient_username,
        group_id=message.group_id,
        created_at=message.created_at,
        is_redacted=message.status == MessageStatus.DELETED_EVERYONE,
    )


@router.get("", response_model=MessageListResponse)
async def list_messages_endpoint(
    context: str | None = Query(None, description="global, private or group"),
    peer: str | None = Query(None, description="Private thread peer handle"),
    group_id: int | None = Query(None),
    view: str | None = Query(None, description="all, sent, drafts, starred or trash"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageListResponse:
    scope = ConversationContext.from_params(context, peer=peer, group_id=group_id)
    messages = query_messages(db, viewer=current_user.username, context=scope)
    if view is not None:
        messages = filter_for_view(messages, current_user.username, view.strip().lower())
    return MessageListResponse(
        context=scope.kind.value,
        peer=scope.peer,
        group_id=scope.group_id,
        view=view,
        messages=[_to_message_response(item) for item in messages],
    )


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message_endpoint(
    payload: MessageCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    record = create_message(db, sender=current_user, payload=payload)
    return _to_message_response(record)


@router.get("/updates", response_model=DeliveryUpdatesResponse)
async def updates_endpoint(
    message_cursor: int | None = Query(None, ge=0),
    group_cursor: int | None = Query(None, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> DeliveryUpdatesResponse:
    cursor = None
    if message_cursor is not None or group_cursor is not None:
        # An omitted side starts from the present, like a first poll.
        now = current_cursor(db, viewer=current_user.username)
        cursor = DeliveryCursor(
            message=now.message if message_cursor is None else message_cursor,
            group=now.group if group_cursor is None else group_cursor,
        )
    batch = collect_updates(db, viewer=current_user.username, cursor=cursor)
    return DeliveryUpdatesResponse(
        message_cursor=batch.cursor.message,
        group_cursor=batch.cursor.group,
        events=[
            DeliveryEventResponse(
                category=event.category.value,
                title=event.title,
                preview=event.preview,
                sender=event.sender,
                message_id=event.message_id,
                group_id=event.group_id,
            )
            for event in batch.events
        ],
    )


@router.patch("/{message_id}", response_model=MessageResponse)
async def patch_message_endpoint(
    message_id: int,
    payload: MessagePatchRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    record = patch_message(
        db,
        message_id=message_id,
        viewer=current_user.username,
        add_deleted_for=current_user.username if payload.delete_for_me else None,
        starred=payload.starred,
        new_status=payload.status,
    )
    return _to_message_response(record)
