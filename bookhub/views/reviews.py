"""Pydantic schemas for book reviews."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ReviewResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    book_id: int
    book_title: Optional[str] = None
    rating: int
    review_text: Optional[str] = None
    created_at: Optional[datetime] = None


class ReviewCreateRequest(BaseModel):
    """Payload to review a book; ratings run from 1 to 5 stars."""

    book_id: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices("bookId", "book_id"),
    )
    rating: int = Field(..., ge=1, le=5, strict=True)
    review_text: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("reviewText", "review_text"),
    )

    model_config = ConfigDict(populate_by_name=True)


class ReviewUpdateRequest(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5, strict=True)
    review_text: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("reviewText", "review_text"),
    )

    model_config = ConfigDict(populate_by_name=True)
