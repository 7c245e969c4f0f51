"""SQLAlchemy model for group memberships."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.orm import relationship

from bookhub.models.base import Base


class GroupMembership(Base):
    """Association table between users and groups.

    The composite primary key means a user belongs to a group at most once.
    """

    __tablename__ = "group_members"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    group_id = Column(
        Integer,
        ForeignKey("discussion_groups.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    user = relationship("User", foreign_keys=[user_id])
    group = relationship("DiscussionGroup", foreign_keys=[group_id])


__all__ = ["GroupMembership"]
