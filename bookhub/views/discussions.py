"""Pydantic schemas for group discussions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class DiscussionBook(BaseModel):
    id: int
    title: str
    cover_image: Optional[str] = None
    authors: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)


class DiscussionResponse(BaseModel):
    """A discussion thread; ``created_by`` is the author's username."""

    id: int
    group_id: int
    user_id: Optional[int] = None
    created_by: Optional[str] = None
    book: DiscussionBook
    title: str
    content: str
    created_at: Optional[datetime] = None


class DiscussionCreateRequest(BaseModel):
    book_id: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices("bookId", "book_id"),
    )
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class DiscussionUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
