"""Association records shared across ORM models."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from schoolconnect.constants import GROUP_ROLE_ADMIN, GROUP_ROLE_MEMBER
from schoolconnect.database import Base


class GroupMember(Base):
    """Membership of one account in one group, with its role inside the group."""

    __tablename__ = "group_members"

    group_id = Column(Integer, ForeignKey("group_chats.id", ondelete="CASCADE"), primary_key=True)
    username = Column(String(150), ForeignKey("users.username", ondelete="CASCADE"), primary_key=True, index=True)
    role = Column(String(32), nullable=False, server_default=GROUP_ROLE_MEMBER, default=GROUP_ROLE_MEMBER)
    joined_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    group = relationship("GroupChat", back_populates="memberships")
    user = relationship("User", back_populates="group_memberships")

    @property
    def is_admin(self) -> bool:
        return self.role == GROUP_ROLE_ADMIN


class MessageDeletion(Base):
    """A handle that hid a message from its own view (soft delete for viewer)."""

    __tablename__ = "message_deletions"

    message_id = Column(Integer, ForeignKey("messages.id", ondelete="CASCADE"), primary_key=True)
    username = Column(String(150), primary_key=True)
    deleted_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    message = relationship("Message", back_populates="deletions")


__all__ = ["GroupMember", "MessageDeletion"]
