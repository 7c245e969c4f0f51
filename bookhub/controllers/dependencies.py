"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

import logging
from typing import Annotated, AsyncIterator, NoReturn, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.config.settings import Settings
from bookhub.database import Database
from bookhub.services.access import Decision, Outcome, admin_only
from bookhub.telemetry import record_access_denied
from bookhub.utils import AuthenticationError, Identity, decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: anonymous requests reach the handler and are rejected there.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

_OUTCOME_STATUS = {
    Outcome.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    Outcome.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    Outcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    Outcome.CONFLICT: status.HTTP_409_CONFLICT,
}


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_session(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncIterator[AsyncSession]:
    """Yield one session per request from the application's database."""

    async with database.session_scope() as session:
        yield session


SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_identity(
    settings: SettingsDep,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> Identity | None:
    """Return the caller's identity, or None for missing or invalid tokens."""

    if not token:
        return None

    try:
        payload = decode_access_token(token, settings.security)
    except AuthenticationError:
        logger.debug("Rejected bearer token; treating request as anonymous")
        return None

    return Identity(user_id=payload.user_id, is_admin=payload.is_admin)


OptionalIdentityDep = Annotated[Optional[Identity], Depends(get_identity)]


async def require_identity(identity: OptionalIdentityDep) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in.",
        )
    return identity


IdentityDep = Annotated[Identity, Depends(require_identity)]


async def require_admin(identity: OptionalIdentityDep) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admins only.",
        )
    raise_for_decision(admin_only(identity), "admin")
    return identity


AdminDep = Annotated[Identity, Depends(require_admin)]


def raise_for_decision(decision: Decision, operation: str) -> None:
    """Translate a denied access decision into an HTTP error."""

    if decision.allowed:
        return
    _deny(decision, operation)


def _deny(decision: Decision, operation: str) -> NoReturn:
    record_access_denied(operation, decision.outcome.value)
    logger.info(
        "Denied %s: %s (%s)",
        operation,
        decision.message,
        decision.outcome.value,
    )
    raise HTTPException(
        status_code=_OUTCOME_STATUS[decision.outcome],
        detail=decision.message,
    )


__all__ = [
    "AdminDep",
    "IdentityDep",
    "OptionalIdentityDep",
    "SessionDep",
    "SettingsDep",
    "get_identity",
    "get_session",
    "get_settings",
    "oauth2_scheme",
    "raise_for_decision",
    "require_admin",
    "require_identity",
]
