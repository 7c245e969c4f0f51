"""Pydantic schemas for topics."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TopicResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class TopicBookRef(BaseModel):
    id: int
    title: str
    authors: list[str] = Field(default_factory=list)


class TopicDetailsResponse(BaseModel):
    topic_id: int
    topic_name: str
    books: list[TopicBookRef] = Field(default_factory=list)
