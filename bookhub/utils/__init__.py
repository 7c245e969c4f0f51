"""Utility helpers for the Fantasy Book Hub backend."""

from .security import (
    AuthenticationError,
    Identity,
    TokenPayload,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "AuthenticationError",
    "Identity",
    "TokenPayload",
]
