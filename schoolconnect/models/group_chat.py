"""SQLAlchemy ORM model for group chats."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from schoolconnect.database import Base


class GroupChat(Base):
    __tablename__ = "group_chats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    created_by = Column(String(150), ForeignKey("users.username", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    memberships = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="GroupMember.joined_at",
    )
    messages = relationship("Message", back_populates="group", cascade="all, delete-orphan")

    @property
    def members(self) -> list[str]:
        return [membership.username for membership in self.memberships]

    @property
    def admins(self) -> list[str]:
        return [membership.username for membership in self.memberships if membership.is_admin]

    def has_member(self, username: str) -> bool:
        return username in self.members


__all__ = ["GroupChat"]
