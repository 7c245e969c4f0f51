"""Book catalog helpers: ingesting books and computing listing aggregates."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.models.book import Author, Book, Topic
from bookhub.models.discussion import GroupDiscussion
from bookhub.models.review import Review

logger = logging.getLogger(__name__)

_TOPIC_DELIMITERS = re.compile(r"[/;,\-]")
_LIKE_SPECIALS = re.compile(r"([\\%_])")


def split_topics(raw: str | Iterable[str] | None) -> list[str]:
    """Split topic strings on ``/``, ``;``, ``-`` and ``,``.

    Accepts a single string or a list of strings; blanks are dropped.
    """

    if raw is None:
        return []
    chunks = [raw] if isinstance(raw, str) else list(raw)
    topics: list[str] = []
    for chunk in chunks:
        for part in _TOPIC_DELIMITERS.split(chunk):
            part = part.strip()
            if part:
                topics.append(part)
    return topics


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user input only matches literally."""

    return _LIKE_SPECIALS.sub(r"\\\1", text)


def contains_ci(column, text: str):
    """Case-insensitive substring match of ``text`` against ``column``."""

    return column.ilike(f"%{escape_like(text)}%", escape="\\")


def split_authors(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def format_average_rating(average: float | None, count: int) -> str:
    if not count or average is None:
        return "No reviews"
    return f"{float(average):.1f} of {count} reviews"


async def _resolve_authors(session: AsyncSession, names: Sequence[str]) -> list[Author]:
    resolved: dict[str, Author] = {}
    for name in names:
        name = name.strip()
        key = name.lower()
        if not name or key in resolved:
            continue
        result = await session.execute(
            select(Author).where(func.lower(Author.name) == key).order_by(Author.id)
        )
        author = result.scalars().first()
        if author is None:
            author = Author(name=name)
            session.add(author)
        resolved[key] = author
    return list(resolved.values())


async def _resolve_topics(session: AsyncSession, names: Sequence[str]) -> list[Topic]:
    resolved: dict[str, Topic] = {}
    for name in names:
        name = name.strip()
        key = name.lower()
        if not name or key in resolved:
            continue
        result = await session.execute(
            select(Topic).where(func.lower(Topic.name) == key).order_by(Topic.id)
        )
        topic = result.scalars().first()
        if topic is None:
            topic = Topic(name=name)
            session.add(topic)
        resolved[key] = topic
    return list(resolved.values())


async def ingest_book(
    session: AsyncSession,
    *,
    title: str,
    cover_image: str | None = None,
    year_published: int | None = None,
    synopsis: str | None = None,
    authors: Sequence[str] = (),
    topics: Sequence[str] = (),
) -> Book:
    """Add a book and link its authors and topics.

    Existing authors and topics are reused by case-insensitive name. The book
    is flushed but not committed, so the caller owns the transaction.
    """

    # Autoflush would insert half-built rows while names are being resolved.
    with session.no_autoflush:
        author_rows = await _resolve_authors(session, authors)
        topic_rows = await _resolve_topics(session, topics)

    book = Book(
        title=title.strip(),
        cover_image=cover_image.strip() if cover_image else None,
        year_published=year_published,
        synopsis=synopsis.strip() if synopsis else None,
        authors=author_rows,
        topics=topic_rows,
    )
    session.add(book)
    await session.flush()
    logger.debug(
        "Ingested book %s (%d authors, %d topics)",
        book.id,
        len(author_rows),
        len(topic_rows),
    )
    return book


@dataclass
class CatalogEntry:
    """A book together with its derived listing fields."""

    id: int
    title: str
    cover_image: str | None
    year_published: int | None
    synopsis: str | None
    authors: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    group_count: int = 0
    average_rating: str = "No reviews"


async def summarize_books(
    session: AsyncSession,
    books: Sequence[Book],
) -> list[CatalogEntry]:
    """Attach author/topic names, group counts and ratings to ``books``.

    The books must have ``authors`` and ``topics`` eagerly loaded.
    """

    if not books:
        return []

    book_ids = [book.id for book in books]

    group_rows = await session.execute(
        select(GroupDiscussion.book_id, func.count(distinct(GroupDiscussion.group_id)))
        .where(GroupDiscussion.book_id.in_(book_ids))
        .group_by(GroupDiscussion.book_id)
    )
    group_counts = {book_id: count for book_id, count in group_rows.all()}

    rating_rows = await session.execute(
        select(Review.book_id, func.avg(Review.rating), func.count(Review.id))
        .where(Review.book_id.in_(book_ids))
        .group_by(Review.book_id)
    )
    ratings = {book_id: (avg, count) for book_id, avg, count in rating_rows.all()}

    entries: list[CatalogEntry] = []
    for book in books:
        average, count = ratings.get(book.id, (None, 0))
        entries.append(
            CatalogEntry(
                id=book.id,
                title=book.title,
                cover_image=book.cover_image,
                year_published=book.year_published,
                synopsis=book.synopsis,
                authors=[author.name for author in book.authors],
                topics=[topic.name for topic in book.topics],
                group_count=group_counts.get(book.id, 0),
                average_rating=format_average_rating(average, count),
            )
        )
    return entries


__all__ = [
    "CatalogEntry",
    "contains_ci",
    "escape_like",
    "format_average_rating",
    "ingest_book",
    "split_authors",
    "split_topics",
    "summarize_books",
]
