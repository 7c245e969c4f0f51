"""Pydantic schemas for discussion messages."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    id: int
    discussion_id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    content: str
    created_at: Optional[datetime] = None


class MessageCreateRequest(BaseModel):
    content: str = Field(..., min_length=1)
