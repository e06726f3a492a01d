"""SQLAlchemy ORM model for chat messages."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression, func

from schoolconnect.database import Base


class MessageStatus(StrEnum):
    SENT = "sent"
    DRAFT = "draft"
    DELETED_EVERYONE = "deleted_everyone"


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sender_username = Column(String(150), ForeignKey("users.username", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(UUID(as_uuid=True), nullable=True)
    text = Column(Text, nullable=False)
    status = Column(String(32), nullable=False, server_default=MessageStatus.SENT.value, default=MessageStatus.SENT.value)
    starred = Column(Boolean, nullable=False, server_default=expression.false(), default=False)
    recipient_username = Column(String(150), ForeignKey("users.username", ondelete="CASCADE"), nullable=True, index=True)
    group_id = Column(Integer, ForeignKey("group_chats.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    group = relationship("GroupChat", back_populates="messages")
    deletions = relationship(
        "MessageDeletion",
        back_populates="message",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "recipient_username IS NULL OR group_id IS NULL",
            name="ck_messages_single_addressing",
        ),
    )

    @property
    def deleted_for(self) -> list[str]:
        return sorted(deletion.username for deletion in self.deletions)


__all__ = ["Message", "MessageStatus"]
