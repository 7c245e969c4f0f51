"""Discussion thread endpoints scoped to a group."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookhub.controllers.dependencies import IdentityDep, SessionDep, raise_for_decision
from bookhub.models.book import Book
from bookhub.models.discussion import GroupDiscussion
from bookhub.models.user import User as UserModel
from bookhub.services.access import (
    can_create_discussion,
    can_manage_discussion,
    can_view_discussion,
    can_view_group_discussions,
)
from bookhub.views import (
    DiscussionBook,
    DiscussionCreateRequest,
    DiscussionResponse,
    DiscussionUpdateRequest,
    SuccessResponse,
)

router = APIRouter(prefix="/discussions", tags=["discussions"])


def _serialize_discussion(
    discussion: GroupDiscussion,
    author_username: str | None,
) -> DiscussionResponse:
    book = discussion.book
    return DiscussionResponse(
        id=discussion.id,
        group_id=discussion.group_id,
        user_id=discussion.user_id,
        created_by=author_username,
        book=DiscussionBook(
            id=book.id,
            title=book.title,
            cover_image=book.cover_image,
            authors=[author.name for author in book.authors],
            topics=[topic.name for topic in book.topics],
        ),
        title=discussion.title,
        content=discussion.content,
        created_at=discussion.created_at,
    )


async def _fetch_discussions(
    session: AsyncSession,
    *criteria,
) -> list[DiscussionResponse]:
    """Return matching discussions with their book, newest first."""

    result = await session.execute(
        select(GroupDiscussion, UserModel.username)
        .outerjoin(UserModel, UserModel.id == GroupDiscussion.user_id)
        .options(
            selectinload(GroupDiscussion.book).selectinload(Book.authors),
            selectinload(GroupDiscussion.book).selectinload(Book.topics),
        )
        .where(*criteria)
        .order_by(GroupDiscussion.created_at.desc(), GroupDiscussion.id.desc())
        .execution_options(populate_existing=True)
    )
    return [
        _serialize_discussion(discussion, username)
        for discussion, username in result.all()
    ]


async def _fetch_discussion(
    session: AsyncSession,
    discussion_id: int,
) -> DiscussionResponse:
    discussions = await _fetch_discussions(session, GroupDiscussion.id == discussion_id)
    if not discussions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Discussion not found.",
        )
    return discussions[0]


@router.get("/detail/{discussion_id}", response_model=DiscussionResponse)
async def get_discussion(
    discussion_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> DiscussionResponse:
    decision = await can_view_discussion(session, identity, discussion_id)
    raise_for_decision(decision, "view_discussion")
    return await _fetch_discussion(session, discussion_id)


@router.get("/{group_id}", response_model=list[DiscussionResponse])
async def list_discussions(
    group_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> list[DiscussionResponse]:
    decision = await can_view_group_discussions(session, identity, group_id)
    raise_for_decision(decision, "view_discussions")
    return await _fetch_discussions(session, GroupDiscussion.group_id == group_id)


@router.post(
    "/{group_id}",
    response_model=DiscussionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_discussion(
    group_id: int,
    payload: DiscussionCreateRequest,
    session: SessionDep,
    identity: IdentityDep,
) -> DiscussionResponse:
    """Start a thread about a book; members and the group creator only."""

    decision = await can_create_discussion(session, identity, group_id)
    raise_for_decision(decision, "create_discussion")

    book = await session.execute(select(Book.id).where(Book.id == payload.book_id))
    if book.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found.",
        )

    discussion = GroupDiscussion(
        group_id=group_id,
        user_id=identity.user_id,
        book_id=payload.book_id,
        title=payload.title,
        content=payload.content,
    )
    session.add(discussion)
    await session.commit()

    return await _fetch_discussion(session, discussion.id)


@router.patch("/{discussion_id}", response_model=DiscussionResponse)
async def update_discussion(
    discussion_id: int,
    payload: DiscussionUpdateRequest,
    session: SessionDep,
    identity: IdentityDep,
) -> DiscussionResponse:
    if payload.title is None and payload.content is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one field (title or content) must be provided.",
        )

    decision = await can_manage_discussion(session, identity, discussion_id, "update")
    raise_for_decision(decision, "update_discussion")

    result = await session.execute(
        select(GroupDiscussion).where(GroupDiscussion.id == discussion_id)
    )
    discussion = result.scalar_one()
    if payload.title is not None:
        discussion.title = payload.title
    if payload.content is not None:
        discussion.content = payload.content
    await session.commit()

    return await _fetch_discussion(session, discussion_id)


@router.delete("/{discussion_id}", response_model=SuccessResponse)
async def delete_discussion(
    discussion_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> SuccessResponse:
    """Delete a discussion together with its messages."""

    decision = await can_manage_discussion(session, identity, discussion_id, "delete")
    raise_for_decision(decision, "delete_discussion")

    await session.execute(delete(GroupDiscussion).where(GroupDiscussion.id == discussion_id))
    await session.commit()
    return SuccessResponse(message="Discussion deleted.")
