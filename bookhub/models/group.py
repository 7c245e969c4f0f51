"""SQLAlchemy model defining discussion groups."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from bookhub.models.base import Base


class DiscussionGroup(Base):
    """A user-created group; its creator is tracked here, not as a membership."""

    __tablename__ = "discussion_groups"

    id = Column(Integer, primary_key=True, index=True)
    group_name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    creator = relationship("User", foreign_keys=[created_by])


__all__ = ["DiscussionGroup"]
