"""Security helpers for password management and JWT handling."""

from __future__ import annotations

import base64
import hashlib
import hmac
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bookhub.config.settings import SecurityConfig

_SALT_BYTES = 16
_ITERATIONS = 120_000


def hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash for the supplied password."""

    salt = os.urandom(_SALT_BYTES)
    derived = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        _ITERATIONS,
    )
    return base64.b64encode(salt + derived).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check whether the provided password matches the stored hash."""

    try:
        decoded = base64.b64decode(hashed.encode("utf-8"), validate=True)
    except (ValueError, TypeError):
        return False

    if len(decoded) <= _SALT_BYTES:
        return False

    salt = decoded[:_SALT_BYTES]
    stored = decoded[_SALT_BYTES:]
    candidate = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        _ITERATIONS,
    )
    return hmac.compare_digest(candidate, stored)


class AuthenticationError(Exception):
    """Raised when a JWT cannot be decoded or is otherwise invalid."""


class TokenPayload(BaseModel):
    """Claims embedded in JWT access tokens."""

    user_id: int = Field(alias="userId")
    is_admin: bool = Field(default=False, alias="isAdmin")
    exp: datetime
    iat: datetime | None = None

    model_config = ConfigDict(populate_by_name=True)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller as carried by a verified token."""

    user_id: int
    is_admin: bool = False


def create_access_token(
    user_id: int,
    is_admin: bool,
    config: SecurityConfig,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Generate a signed JWT access token for the given user."""

    now = datetime.now(timezone.utc)
    expires_delta = expires_delta or timedelta(
        minutes=config.access_token_expires_minutes
    )
    to_encode: dict[str, Any] = {
        "userId": user_id,
        "isAdmin": bool(is_admin),
        "exp": now + expires_delta,
        "iat": now,
    }

    return jwt.encode(
        to_encode,
        config.jwt_secret_key.get_secret_value(),
        algorithm=config.jwt_algorithm,
    )


def decode_access_token(token: str, config: SecurityConfig) -> TokenPayload:
    """Decode and validate a JWT access token, returning its payload."""

    try:
        payload = jwt.decode(
            token,
            config.jwt_secret_key.get_secret_value(),
            algorithms=[config.jwt_algorithm],
        )
        return TokenPayload.model_validate(payload)
    except (JWTError, ValidationError) as exc:
        raise AuthenticationError("Invalid authentication token") from exc


__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "AuthenticationError",
    "Identity",
    "TokenPayload",
]
