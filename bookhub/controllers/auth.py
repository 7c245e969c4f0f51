"""Authentication controller providing register and login endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from bookhub.controllers.dependencies import SessionDep, SettingsDep
from bookhub.models.user import User as UserModel
from bookhub.telemetry import increment_login, increment_registration
from bookhub.utils import create_access_token, hash_password, verify_password
from bookhub.views import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterRequest,
    session: SessionDep,
    settings: SettingsDep,
) -> TokenResponse:
    """Create a non-admin account and return a token for it."""

    email = str(payload.email)
    duplicate = await session.execute(
        select(UserModel.id).where(
            or_(
                UserModel.username == payload.username,
                func.lower(UserModel.email) == email.lower(),
            )
        )
    )
    if duplicate.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already registered.",
        )

    user = UserModel(
        username=payload.username,
        email=email,
        password_hash=hash_password(payload.password),
        is_admin=False,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already registered.",
        ) from exc

    await session.refresh(user)
    increment_registration()
    logger.info("Registered user %s", user.id)

    token = create_access_token(user.id, user.is_admin, settings.security)
    return TokenResponse(token=token)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    session: SessionDep,
    settings: SettingsDep,
) -> LoginResponse:
    """Validate credentials and issue a JWT access token."""

    result = await session.execute(
        select(UserModel).where(func.lower(UserModel.email) == payload.email.lower())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email/password.",
        )

    token = create_access_token(user.id, user.is_admin, settings.security)
    increment_login()

    return LoginResponse(token=token, user=UserResponse.model_validate(user))
