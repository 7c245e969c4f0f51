"""SQLAlchemy models for the book catalog: books, authors and topics."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import relationship

from bookhub.models.base import Base

book_authors = Table(
    "book_authors",
    Base.metadata,
    Column(
        "book_id",
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "author_id",
        Integer,
        ForeignKey("authors.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

book_topics = Table(
    "book_topics",
    Base.metadata,
    Column(
        "book_id",
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "topic_id",
        Integer,
        ForeignKey("topics.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Author(Base):
    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)


class Topic(Base):
    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True, index=True)


class Book(Base):
    """A catalog entry; only admins create or delete books."""

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    cover_image = Column(Text, nullable=True)
    year_published = Column(Integer, nullable=True)
    synopsis = Column(Text, nullable=True)
    created_at = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    authors = relationship(
        "Author",
        secondary=book_authors,
        passive_deletes=True,
        order_by="Author.name",
    )
    topics = relationship(
        "Topic",
        secondary=book_topics,
        passive_deletes=True,
        order_by="Topic.name",
    )


__all__ = ["Author", "Book", "Topic", "book_authors", "book_topics"]
