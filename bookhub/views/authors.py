"""Pydantic schemas for authors."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuthorResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class AuthorBookRef(BaseModel):
    id: int
    title: str
    topics: list[str] = Field(default_factory=list)


class AuthorDetailsResponse(BaseModel):
    """An author with every book they wrote."""

    author_id: int
    author_name: str
    books: list[AuthorBookRef] = Field(default_factory=list)
