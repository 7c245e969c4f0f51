"""Pydantic schemas for the book catalog."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BookSummary(BaseModel):
    """A book as it appears in listings and search results."""

    id: int
    title: str
    cover_image: Optional[str] = None
    year_published: Optional[int] = None
    synopsis: Optional[str] = None
    authors: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    group_count: int = 0
    average_rating: str = "No reviews"

    model_config = ConfigDict(from_attributes=True)


class BookListResponse(BaseModel):
    books: list[BookSummary]
    totalBooks: int


class BookSearchResult(BaseModel):
    """Compact match used by type-ahead search."""

    id: int
    title: str
    cover_image: Optional[str] = None
    year_published: Optional[int] = None
    authors: list[str] = Field(default_factory=list)


class BookGroupRef(BaseModel):
    id: int
    group_name: str


class BookDetail(BaseModel):
    """A single book with the groups discussing it."""

    id: int
    title: str
    cover_image: Optional[str] = None
    year_published: Optional[int] = None
    synopsis: Optional[str] = None
    authors: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    average_rating: str = "No reviews"
    groups: list[BookGroupRef] = Field(default_factory=list)


class BookCreateRequest(BaseModel):
    """Payload used by admins to add a book to the catalog."""

    title: str = Field(..., min_length=1, max_length=255)
    cover_image: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("coverImage", "cover_image"),
    )
    year_published: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("yearPublished", "year_published"),
    )
    synopsis: Optional[str] = None
    authors: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
