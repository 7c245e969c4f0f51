"""User controller implementing profile CRUD endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.controllers.dependencies import (
    AdminDep,
    IdentityDep,
    SessionDep,
    raise_for_decision,
)
from bookhub.models.user import User as UserModel
from bookhub.services.access import can_access_user
from bookhub.utils import hash_password
from bookhub.views import SuccessResponse, UserResponse, UserUpdateRequest

router = APIRouter(prefix="/users", tags=["users"])


async def _get_user_or_404(session: AsyncSession, user_id: int) -> UserModel:
    result = await session.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found.",
        )
    return user


@router.get("", response_model=list[UserResponse])
async def list_users(
    session: SessionDep,
    _admin: AdminDep,
) -> list[UserResponse]:
    result = await session.execute(select(UserModel).order_by(UserModel.id))
    return [UserResponse.model_validate(user) for user in result.scalars().all()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> UserResponse:
    raise_for_decision(can_access_user(identity, user_id), "view_user")
    user = await _get_user_or_404(session, user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    session: SessionDep,
    identity: IdentityDep,
) -> UserResponse:
    """Update username, email or password for yourself (or anyone, as admin)."""

    raise_for_decision(can_access_user(identity, user_id), "update_user")

    if payload.username is None and payload.email is None and payload.password is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one field (username, email or password) must be provided.",
        )

    user = await _get_user_or_404(session, user_id)

    email = str(payload.email) if payload.email is not None else None
    conflicts = []
    if payload.username is not None:
        conflicts.append(UserModel.username == payload.username)
    if email is not None:
        conflicts.append(func.lower(UserModel.email) == email.lower())
    if conflicts:
        duplicate = await session.execute(
            select(UserModel.id).where(UserModel.id != user.id, or_(*conflicts))
        )
        if duplicate.first() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username or email already in use.",
            )

    if payload.username is not None:
        user.username = payload.username
    if email is not None:
        user.email = email
    if payload.password is not None:
        user.password_hash = hash_password(payload.password)

    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already in use.",
        ) from exc

    await session.refresh(user)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: int,
    session: SessionDep,
    _admin: AdminDep,
) -> SuccessResponse:
    result = await session.execute(delete(UserModel).where(UserModel.id == user_id))
    if result.rowcount == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found.",
        )
    await session.commit()
    return SuccessResponse(message="User deleted")
