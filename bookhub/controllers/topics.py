"""Topic browsing endpoints."""

from __future__ import annotations

from typing import Optional, Sequence

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookhub.controllers.dependencies import IdentityDep, SessionDep
from bookhub.models.book import Book, Topic, book_topics
from bookhub.services.catalog import contains_ci
from bookhub.views import TopicBookRef, TopicDetailsResponse, TopicResponse

router = APIRouter(prefix="/topics", tags=["topics"])


async def _with_books(
    session: AsyncSession,
    topics: Sequence[Topic],
) -> list[TopicDetailsResponse]:
    topic_ids = [topic.id for topic in topics]
    rows = await session.execute(
        select(book_topics.c.topic_id, Book)
        .join(Book, Book.id == book_topics.c.book_id)
        .where(book_topics.c.topic_id.in_(topic_ids))
        .options(selectinload(Book.authors))
        .order_by(Book.title, Book.id)
    )
    books_by_topic: dict[int, list[TopicBookRef]] = {}
    for topic_id, book in rows.all():
        books_by_topic.setdefault(topic_id, []).append(
            TopicBookRef(
                id=book.id,
                title=book.title,
                authors=[author.name for author in book.authors],
            )
        )

    return [
        TopicDetailsResponse(
            topic_id=topic.id,
            topic_name=topic.name,
            books=books_by_topic.get(topic.id, []),
        )
        for topic in topics
    ]


async def _all_topics(session: AsyncSession) -> Sequence[Topic]:
    result = await session.execute(select(Topic).order_by(Topic.name, Topic.id))
    topics = result.scalars().all()
    if not topics:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No topics found.",
        )
    return topics


@router.get("", response_model=list[TopicResponse])
async def list_topics(
    session: SessionDep,
    _identity: IdentityDep,
) -> list[TopicResponse]:
    topics = await _all_topics(session)
    return [TopicResponse.model_validate(topic) for topic in topics]


@router.get("/details", response_model=list[TopicDetailsResponse])
async def list_topics_with_books(
    session: SessionDep,
    _identity: IdentityDep,
) -> list[TopicDetailsResponse]:
    topics = await _all_topics(session)
    return await _with_books(session, topics)


@router.get("/search", response_model=list[TopicDetailsResponse])
async def search_topics(
    session: SessionDep,
    _identity: IdentityDep,
    name: Optional[str] = None,
) -> list[TopicDetailsResponse]:
    """Find topics whose name contains ``name`` (case-insensitive)."""

    if not name or not name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query parameter 'name' is required.",
        )

    result = await session.execute(
        select(Topic)
        .where(contains_ci(Topic.name, name.strip()))
        .order_by(Topic.name, Topic.id)
    )
    topics = result.scalars().all()
    if not topics:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No topics found matching your search.",
        )
    return await _with_books(session, topics)
