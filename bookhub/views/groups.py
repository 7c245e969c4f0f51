"""Pydantic schemas for discussion groups and membership."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class GroupCreateRequest(BaseModel):
    """Payload to create a group."""

    group_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("groupName", "group_name"),
    )
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class GroupUpdateRequest(BaseModel):
    """Payload to rename/update a group."""

    group_name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("groupName", "group_name"),
    )
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class GroupResponse(BaseModel):
    """A group with its creator and activity counts."""

    id: int
    group_name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_by_username: Optional[str] = None
    member_count: int = 0
    discussion_count: int = 0


class GroupMemberResponse(BaseModel):
    user_id: int
    username: str


class JoinGroupResponse(BaseModel):
    message: str
    group_id: int
    user_id: int


class MembershipStatusResponse(BaseModel):
    isMember: bool
