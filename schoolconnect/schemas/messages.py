"""Schemas used by messaging endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import MessageStatus


class MessageCreateRequest(BaseModel):
    text: str = Field(..., description="Message body")
    status: MessageStatus = Field(MessageStatus.SENT, description="Lifecycle state to persist")
    recipient: str | None = Field(None, description="Handle of the private thread peer")
    group_id: int | None = Field(None, description="Target group for group messages")

    @field_validator("recipient")
    @classmethod
    def strip_recipient(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _single_addressing(self) -> "MessageCreateRequest":
        if self.recipient and self.group_id is not None:
            raise ValueError("A message is either private or addressed to a group, not both")
        return self


class MessagePatchRequest(BaseModel):
    delete_for_me: bool = Field(False, description="Hide the message from the caller's own view")
    starred: bool | None = None
    status: MessageStatus | None = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_username: str
    sender_id: UUID | None = None
    text: str
    status: MessageStatus
    starred: bool
    deleted_for: List[str] = Field(default_factory=list)
    recipient_username: str | None = None
    group_id: int | None = None
    created_at: datetime
    is_redacted: bool = False


class MessageListResponse(BaseModel):
    context: str
    peer: str | None = None
    group_id: int | None = None
    view: str | None = None
    messages: List[MessageResponse]


class GroupCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    members: List[str] = Field(default_factory=list)


class GroupResponse(BaseModel):
    id: int
    name: str
    created_by: str
    members: List[str]
    admins: List[str]
    created_at: datetime


class DeliveryEventResponse(BaseModel):
    category: str
    title: str
    preview: str | None = None
    sender: str | None = None
    message_id: int | None = None
    group_id: int | None = None


class DeliveryUpdatesResponse(BaseModel):
    message_cursor: int
    group_cursor: int
    events: List[DeliveryEventResponse]


__all__ = [
    "MessageCreateRequest",
    "MessagePatchRequest",
    "MessageResponse",
    "MessageListResponse",
    "GroupCreateRequest",
    "GroupResponse",
    "DeliveryEventResponse",
    "DeliveryUpdatesResponse",
]
