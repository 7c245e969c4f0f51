"""Author browsing endpoints."""

from __future__ import annotations

from typing import Optional, Sequence

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookhub.controllers.dependencies import IdentityDep, SessionDep
from bookhub.models.book import Author, Book, book_authors
from bookhub.services.catalog import contains_ci
from bookhub.views import AuthorBookRef, AuthorDetailsResponse, AuthorResponse

router = APIRouter(prefix="/authors", tags=["authors"])


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


async def _with_books(
    session: AsyncSession,
    authors: Sequence[Author],
) -> list[AuthorDetailsResponse]:
    """Attach each author's books (with topics) ordered by title."""

    author_ids = [author.id for author in authors]
    rows = await session.execute(
        select(book_authors.c.author_id, Book)
        .join(Book, Book.id == book_authors.c.book_id)
        .where(book_authors.c.author_id.in_(author_ids))
        .options(selectinload(Book.topics))
        .order_by(Book.title, Book.id)
    )
    books_by_author: dict[int, list[AuthorBookRef]] = {}
    for author_id, book in rows.all():
        books_by_author.setdefault(author_id, []).append(
            AuthorBookRef(
                id=book.id,
                title=book.title,
                topics=[topic.name for topic in book.topics],
            )
        )

    return [
        AuthorDetailsResponse(
            author_id=author.id,
            author_name=author.name,
            books=books_by_author.get(author.id, []),
        )
        for author in authors
    ]


@router.get("", response_model=list[AuthorResponse])
async def list_authors(
    session: SessionDep,
    _identity: IdentityDep,
) -> list[AuthorResponse]:
    result = await session.execute(select(Author).order_by(Author.name, Author.id))
    authors = result.scalars().all()
    if not authors:
        raise _not_found("No authors found.")
    return [AuthorResponse.model_validate(author) for author in authors]


@router.get("/details", response_model=list[AuthorDetailsResponse])
async def list_authors_with_books(
    session: SessionDep,
    _identity: IdentityDep,
) -> list[AuthorDetailsResponse]:
    result = await session.execute(select(Author).order_by(Author.name, Author.id))
    authors = result.scalars().all()
    if not authors:
        raise _not_found("No authors found.")
    return await _with_books(session, authors)


@router.get("/search", response_model=list[AuthorDetailsResponse])
async def search_authors(
    session: SessionDep,
    _identity: IdentityDep,
    name: Optional[str] = None,
) -> list[AuthorDetailsResponse]:
    if not name or not name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query parameter 'name' is required.",
        )

    result = await session.execute(
        select(Author)
        .where(contains_ci(Author.name, name.strip()))
        .order_by(Author.name, Author.id)
    )
    authors = result.scalars().all()
    if not authors:
        raise _not_found("No authors found matching your search.")
    return await _with_books(session, authors)
