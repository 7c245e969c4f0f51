"""Endpoints for discussion group creation and membership management."""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.controllers.dependencies import IdentityDep, SessionDep, raise_for_decision
from bookhub.models.book import Author, Book, Topic
from bookhub.models.discussion import GroupDiscussion
from bookhub.models.group import DiscussionGroup
from bookhub.models.group_membership import GroupMembership
from bookhub.models.user import User as UserModel
from bookhub.services import predicates
from bookhub.services.access import (
    account_active,
    can_join_group,
    can_leave_group,
    can_manage_group,
)
from bookhub.services.catalog import contains_ci
from bookhub.views import (
    GroupCreateRequest,
    GroupMemberResponse,
    GroupResponse,
    GroupUpdateRequest,
    JoinGroupResponse,
    MembershipStatusResponse,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups", tags=["groups"])

_GROUP_NOT_FOUND = "Group not found."


def _group_query():
    """Groups with creator username and activity counts.

    Outer join keeps groups whose creator account was deleted.
    """

    member_count = (
        select(func.count())
        .select_from(GroupMembership)
        .where(GroupMembership.group_id == DiscussionGroup.id)
        .scalar_subquery()
    )
    discussion_count = (
        select(func.count())
        .select_from(GroupDiscussion)
        .where(GroupDiscussion.group_id == DiscussionGroup.id)
        .scalar_subquery()
    )
    return select(
        DiscussionGroup,
        UserModel.username,
        member_count,
        discussion_count,
    ).outerjoin(UserModel, UserModel.id == DiscussionGroup.created_by)


def _serialize_group(
    group: DiscussionGroup,
    creator_username: str | None,
    member_count: int,
    discussion_count: int,
) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        group_name=group.group_name,
        description=group.description,
        created_at=group.created_at,
        created_by=group.created_by,
        created_by_username=creator_username,
        member_count=member_count or 0,
        discussion_count=discussion_count or 0,
    )


async def _fetch_groups(session: AsyncSession, *criteria) -> list[GroupResponse]:
    result = await session.execute(
        _group_query()
        .where(*criteria)
        .order_by(DiscussionGroup.id)
        .execution_options(populate_existing=True)
    )
    return [_serialize_group(*row) for row in result.all()]


async def _get_group_or_404(session: AsyncSession, group_id: int) -> GroupResponse:
    groups = await _fetch_groups(session, DiscussionGroup.id == group_id)
    if not groups:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_GROUP_NOT_FOUND,
        )
    return groups[0]


async def _ensure_unique_name(
    session: AsyncSession,
    group_name: str,
    exclude_id: int | None = None,
) -> None:
    query = select(func.count(DiscussionGroup.id)).where(
        func.lower(DiscussionGroup.group_name) == group_name.lower()
    )
    if exclude_id is not None:
        query = query.where(DiscussionGroup.id != exclude_id)
    duplicate = await session.execute(query)
    if duplicate.scalar_one() > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A group with this name already exists.",
        )


@router.get("", response_model=list[GroupResponse])
async def list_groups(
    session: SessionDep,
    _identity: IdentityDep,
) -> list[GroupResponse]:
    return await _fetch_groups(session)


@router.get("/search", response_model=list[GroupResponse])
async def search_groups(
    session: SessionDep,
    _identity: IdentityDep,
    author: Optional[str] = None,
    title: Optional[str] = None,
    topic: Optional[str] = None,
    group_title: Annotated[Optional[str], Query(alias="groupTitle")] = None,
    group_description: Annotated[Optional[str], Query(alias="groupDescription")] = None,
) -> list[GroupResponse]:
    """Find groups by their own fields or by the books they discuss.

    Every supplied filter must match; book filters must match the same book.
    """

    criteria = []
    if group_title:
        criteria.append(contains_ci(DiscussionGroup.group_name, group_title))
    if group_description:
        criteria.append(contains_ci(DiscussionGroup.description, group_description))

    book_criteria = []
    if title:
        book_criteria.append(contains_ci(Book.title, title))
    if author:
        book_criteria.append(Book.authors.any(contains_ci(Author.name, author)))
    if topic:
        book_criteria.append(Book.topics.any(contains_ci(Topic.name, topic)))
    if book_criteria:
        discussed = (
            select(GroupDiscussion.group_id)
            .join(Book, Book.id == GroupDiscussion.book_id)
            .where(*book_criteria)
        )
        criteria.append(DiscussionGroup.id.in_(discussed))

    return await _fetch_groups(session, *criteria)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: int,
    session: SessionDep,
    _identity: IdentityDep,
) -> GroupResponse:
    return await _get_group_or_404(session, group_id)


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    payload: GroupCreateRequest,
    session: SessionDep,
    identity: IdentityDep,
) -> GroupResponse:
    """Create a group owned by the caller.

    The creator is recorded in ``created_by`` but is not added as a member.
    """

    raise_for_decision(await account_active(session, identity), "create_group")

    group_name = payload.group_name.strip()
    if not group_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Group name is required.",
        )
    await _ensure_unique_name(session, group_name)

    group = DiscussionGroup(
        group_name=group_name,
        description=payload.description,
        created_by=identity.user_id,
    )
    session.add(group)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Unable to create group.",
        ) from exc

    logger.info("User %s created group %s", identity.user_id, group.id)
    return await _get_group_or_404(session, group.id)


@router.patch("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: int,
    payload: GroupUpdateRequest,
    session: SessionDep,
    identity: IdentityDep,
) -> GroupResponse:
    """Update group metadata (name/description)."""

    if payload.group_name is None and payload.description is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one field (groupName or description) must be provided.",
        )

    decision = await can_manage_group(session, identity, group_id, "update")
    raise_for_decision(decision, "update_group")

    result = await session.execute(
        select(DiscussionGroup).where(DiscussionGroup.id == group_id)
    )
    group = result.scalar_one()

    if payload.group_name is not None:
        new_name = payload.group_name.strip()
        if not new_name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Group name cannot be empty.",
            )
        await _ensure_unique_name(session, new_name, exclude_id=group.id)
        group.group_name = new_name
    if payload.description is not None:
        group.description = payload.description

    await session.commit()
    return await _get_group_or_404(session, group_id)


@router.delete("/{group_id}", response_model=SuccessResponse)
async def delete_group(
    group_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> SuccessResponse:
    """Delete a group; its memberships, discussions and messages go with it."""

    decision = await can_manage_group(session, identity, group_id, "delete")
    raise_for_decision(decision, "delete_group")

    await session.execute(delete(DiscussionGroup).where(DiscussionGroup.id == group_id))
    await session.commit()
    logger.info("User %s deleted group %s", identity.user_id, group_id)
    return SuccessResponse(message="Group deleted.")


@router.post("/{group_id}/join", response_model=JoinGroupResponse)
async def join_group(
    group_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> JoinGroupResponse:
    decision = await can_join_group(session, identity, group_id)
    raise_for_decision(decision, "join_group")

    membership = GroupMembership(group_id=group_id, user_id=identity.user_id)
    session.add(membership)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not await predicates.is_user_in_group(session, group_id, identity.user_id):
            raise
        # Lost a race with a concurrent join of the same user.
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already in the group.",
        ) from exc

    return JoinGroupResponse(
        message="User added to group.",
        group_id=group_id,
        user_id=identity.user_id,
    )


@router.delete("/{group_id}/leave", response_model=SuccessResponse)
async def leave_group(
    group_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> SuccessResponse:
    decision = await can_leave_group(session, identity, group_id)
    raise_for_decision(decision, "leave_group")

    await session.execute(
        delete(GroupMembership).where(
            GroupMembership.group_id == group_id,
            GroupMembership.user_id == identity.user_id,
        )
    )
    await session.commit()
    return SuccessResponse(message="User removed from group.")


@router.get("/{group_id}/members", response_model=list[GroupMemberResponse])
async def list_group_members(
    group_id: int,
    session: SessionDep,
    _identity: IdentityDep,
) -> list[GroupMemberResponse]:
    if not await predicates.group_exists(session, group_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_GROUP_NOT_FOUND,
        )

    result = await session.execute(
        select(UserModel.id, UserModel.username)
        .join(GroupMembership, GroupMembership.user_id == UserModel.id)
        .where(GroupMembership.group_id == group_id)
        .order_by(UserModel.username)
    )
    return [
        GroupMemberResponse(user_id=user_id, username=username)
        for user_id, username in result.all()
    ]


@router.get("/{group_id}/is-member", response_model=MembershipStatusResponse)
async def check_membership(
    group_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> MembershipStatusResponse:
    """Admins are always reported as members."""

    if identity.is_admin:
        return MembershipStatusResponse(isMember=True)
    is_member = await predicates.is_user_in_group(session, group_id, identity.user_id)
    return MembershipStatusResponse(isMember=is_member)
