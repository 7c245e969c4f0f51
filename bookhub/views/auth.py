"""Pydantic schemas for authentication flows."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator

from bookhub.views.users import UserResponse, strip_username


class RegisterRequest(BaseModel):
    """Payload to create an account."""

    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    normalize_username = field_validator("username")(strip_username)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


class LoginResponse(BaseModel):
    token: str
    user: UserResponse
