"""Book catalog endpoints: listing, search, detail and admin maintenance."""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookhub.controllers.dependencies import AdminDep, IdentityDep, SessionDep
from bookhub.models.book import Author, Book, Topic
from bookhub.models.discussion import GroupDiscussion
from bookhub.models.group import DiscussionGroup
from bookhub.services.catalog import (
    CatalogEntry,
    contains_ci,
    ingest_book,
    summarize_books,
)
from bookhub.views import (
    BookCreateRequest,
    BookDetail,
    BookGroupRef,
    BookListResponse,
    BookSearchResult,
    BookSummary,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["books"])

PageQuery = Annotated[int, Query(ge=1)]
LimitQuery = Annotated[int, Query(ge=1, le=100)]

_DYNAMIC_SEARCH_MIN_LENGTH = 3
_DYNAMIC_SEARCH_LIMIT = 10


def _book_query():
    return select(Book).options(selectinload(Book.authors), selectinload(Book.topics))


async def _list_page(
    session: AsyncSession,
    filters: list,
    page: int,
    limit: int,
) -> BookListResponse:
    total = await session.execute(select(func.count(Book.id)).where(*filters))
    result = await session.execute(
        _book_query()
        .where(*filters)
        .order_by(Book.title, Book.id)
        .limit(limit)
        .offset((page - 1) * limit)
    )
    entries = await summarize_books(session, result.scalars().all())
    return BookListResponse(
        books=[_serialize_summary(entry) for entry in entries],
        totalBooks=total.scalar_one(),
    )


def _serialize_summary(entry: CatalogEntry) -> BookSummary:
    return BookSummary.model_validate(entry)


async def _serialize_detail(session: AsyncSession, book: Book) -> BookDetail:
    (entry,) = await summarize_books(session, [book])
    groups = await session.execute(
        select(DiscussionGroup.id, DiscussionGroup.group_name)
        .join(GroupDiscussion, GroupDiscussion.group_id == DiscussionGroup.id)
        .where(GroupDiscussion.book_id == book.id)
        .distinct()
        .order_by(DiscussionGroup.id)
    )
    return BookDetail(
        id=entry.id,
        title=entry.title,
        cover_image=entry.cover_image,
        year_published=entry.year_published,
        synopsis=entry.synopsis,
        authors=entry.authors,
        topics=entry.topics,
        average_rating=entry.average_rating,
        groups=[
            BookGroupRef(id=group_id, group_name=group_name)
            for group_id, group_name in groups.all()
        ],
    )


@router.get("", response_model=BookListResponse)
async def list_books(
    session: SessionDep,
    _identity: IdentityDep,
    page: PageQuery = 1,
    limit: LimitQuery = 20,
) -> BookListResponse:
    """Return one page of books ordered by title."""

    return await _list_page(session, [], page, limit)


@router.get("/search", response_model=BookListResponse)
async def search_books(
    session: SessionDep,
    _identity: IdentityDep,
    title: Optional[str] = None,
    author: Optional[str] = None,
    topic: Optional[str] = None,
    page: PageQuery = 1,
    limit: LimitQuery = 20,
) -> BookListResponse:
    """Filter books by partial, case-insensitive title/author/topic matches."""

    filters = []
    if title:
        filters.append(contains_ci(Book.title, title))
    if author:
        filters.append(Book.authors.any(contains_ci(Author.name, author)))
    if topic:
        filters.append(Book.topics.any(contains_ci(Topic.name, topic)))

    return await _list_page(session, filters, page, limit)


@router.get("/search/dynamic", response_model=list[BookSearchResult])
async def search_books_dynamic(
    session: SessionDep,
    _identity: IdentityDep,
    query: str = "",
) -> list[BookSearchResult]:
    """Type-ahead search over titles and author names."""

    query = query.strip()
    if len(query) < _DYNAMIC_SEARCH_MIN_LENGTH:
        return []

    result = await session.execute(
        select(Book)
        .options(selectinload(Book.authors))
        .where(
            or_(
                contains_ci(Book.title, query),
                Book.authors.any(contains_ci(Author.name, query)),
            )
        )
        .order_by(Book.title, Book.id)
        .limit(_DYNAMIC_SEARCH_LIMIT)
    )
    return [
        BookSearchResult(
            id=book.id,
            title=book.title,
            cover_image=book.cover_image,
            year_published=book.year_published,
            authors=[author.name for author in book.authors],
        )
        for book in result.scalars().all()
    ]


@router.get("/{book_id}", response_model=BookDetail)
async def get_book(
    book_id: int,
    session: SessionDep,
    _identity: IdentityDep,
) -> BookDetail:
    result = await session.execute(_book_query().where(Book.id == book_id))
    book = result.scalar_one_or_none()
    if not book:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found.",
        )
    return await _serialize_detail(session, book)


@router.post("", response_model=BookDetail, status_code=status.HTTP_201_CREATED)
async def create_book(
    payload: BookCreateRequest,
    session: SessionDep,
    admin: AdminDep,
) -> BookDetail:
    """Add a book, reusing existing authors and topics by name."""

    book = await ingest_book(
        session,
        title=payload.title,
        cover_image=payload.cover_image,
        year_published=payload.year_published,
        synopsis=payload.synopsis,
        authors=payload.authors,
        topics=payload.topics,
    )
    await session.commit()
    logger.info("Admin %s created book %s", admin.user_id, book.id)

    result = await session.execute(
        _book_query()
        .where(Book.id == book.id)
        .execution_options(populate_existing=True)
    )
    return await _serialize_detail(session, result.scalar_one())


@router.delete("/{book_id}", response_model=SuccessResponse)
async def delete_book(
    book_id: int,
    session: SessionDep,
    admin: AdminDep,
) -> SuccessResponse:
    result = await session.execute(delete(Book).where(Book.id == book_id))
    if result.rowcount == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found.",
        )
    await session.commit()
    logger.info("Admin %s deleted book %s", admin.user_id, book_id)
    return SuccessResponse(message="Book deleted.")
