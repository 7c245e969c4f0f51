"""Pydantic schemas for user interactions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def strip_username(value: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace and reject blank usernames."""

    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Username cannot be blank")
    return value


class UserResponse(BaseModel):
    """Public representation of a user; never carries the password hash."""

    id: int
    username: str
    email: str
    is_admin: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserUpdateRequest(BaseModel):
    """Partial profile update; at least one field must be supplied."""

    username: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1, max_length=128)

    normalize_username = field_validator("username")(strip_username)
