"""Single-row lookups used to authorize requests.

Every helper tolerates ids that do not exist: missing rows answer ``False``
(or ``None`` where the caller needs to tell "missing" apart from "no").
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.models.discussion import GroupDiscussion
from bookhub.models.group import DiscussionGroup
from bookhub.models.group_membership import GroupMembership
from bookhub.models.review import Review
from bookhub.models.user import User


async def user_exists(session: AsyncSession, user_id: int) -> bool:
    """Tokens outlive accounts; check the caller still has a row."""

    result = await session.execute(select(User.id).where(User.id == user_id))
    return result.scalar_one_or_none() is not None


async def is_review_owner(
    session: AsyncSession,
    review_id: int,
    user_id: int,
) -> bool | None:
    """Return whether ``user_id`` wrote the review, or None if it is missing."""

    result = await session.execute(
        select(Review.user_id).where(Review.id == review_id)
    )
    owner_id = result.scalar_one_or_none()
    if owner_id is None:
        return None
    return owner_id == user_id


async def group_exists(session: AsyncSession, group_id: int) -> bool:
    result = await session.execute(
        select(DiscussionGroup.id).where(DiscussionGroup.id == group_id)
    )
    return result.scalar_one_or_none() is not None


async def is_group_owner(session: AsyncSession, group_id: int, user_id: int) -> bool:
    """Compare the group's ``created_by`` column with ``user_id``."""

    result = await session.execute(
        select(DiscussionGroup.created_by).where(DiscussionGroup.id == group_id)
    )
    created_by = result.scalar_one_or_none()
    return created_by is not None and created_by == user_id


async def is_group_creator(session: AsyncSession, group_id: int, user_id: int) -> bool:
    """Check for a group row created by ``user_id``."""

    result = await session.execute(
        select(DiscussionGroup.id).where(
            DiscussionGroup.id == group_id,
            DiscussionGroup.created_by == user_id,
        )
    )
    return result.first() is not None


async def is_user_in_group(session: AsyncSession, group_id: int, user_id: int) -> bool:
    result = await session.execute(
        select(GroupMembership.user_id).where(
            GroupMembership.group_id == group_id,
            GroupMembership.user_id == user_id,
        )
    )
    return result.first() is not None


async def discussion_group_id(session: AsyncSession, discussion_id: int) -> int | None:
    """Return the id of the group a discussion belongs to."""

    result = await session.execute(
        select(GroupDiscussion.group_id).where(GroupDiscussion.id == discussion_id)
    )
    return result.scalar_one_or_none()


async def is_discussion_creator(
    session: AsyncSession,
    discussion_id: int,
    user_id: int,
) -> bool:
    result = await session.execute(
        select(GroupDiscussion.id).where(
            GroupDiscussion.id == discussion_id,
            GroupDiscussion.user_id == user_id,
        )
    )
    return result.first() is not None


async def get_group_creator_by_discussion(
    session: AsyncSession,
    discussion_id: int,
) -> int | None:
    """Return the creator of the group that owns the discussion."""

    result = await session.execute(
        select(DiscussionGroup.created_by)
        .join(GroupDiscussion, GroupDiscussion.group_id == DiscussionGroup.id)
        .where(GroupDiscussion.id == discussion_id)
    )
    return result.scalar_one_or_none()


__all__ = [
    "user_exists",
    "is_review_owner",
    "group_exists",
    "is_group_owner",
    "is_group_creator",
    "is_user_in_group",
    "discussion_group_id",
    "is_discussion_creator",
    "get_group_creator_by_discussion",
]
