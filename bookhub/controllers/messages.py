"""Message endpoints for discussion threads."""

from __future__ import annotations

from fastapi import APIRouter, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.controllers.dependencies import IdentityDep, SessionDep, raise_for_decision
from bookhub.models.message import DiscussionMessage
from bookhub.models.user import User as UserModel
from bookhub.services.access import can_post_message, can_view_messages
from bookhub.views import MessageCreateRequest, MessageResponse

router = APIRouter(prefix="/messages", tags=["messages"])


async def _fetch_messages(session: AsyncSession, *criteria) -> list[MessageResponse]:
    """Return matching messages, oldest first."""

    result = await session.execute(
        select(DiscussionMessage, UserModel.username)
        .outerjoin(UserModel, UserModel.id == DiscussionMessage.user_id)
        .where(*criteria)
        .order_by(DiscussionMessage.created_at, DiscussionMessage.id)
        .execution_options(populate_existing=True)
    )
    return [
        MessageResponse(
            id=message.id,
            discussion_id=message.discussion_id,
            user_id=message.user_id,
            username=username,
            content=message.content,
            created_at=message.created_at,
        )
        for message, username in result.all()
    ]


@router.get("/{discussion_id}", response_model=list[MessageResponse])
async def list_messages(
    discussion_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> list[MessageResponse]:
    decision = await can_view_messages(session, identity, discussion_id)
    raise_for_decision(decision, "view_messages")
    return await _fetch_messages(session, DiscussionMessage.discussion_id == discussion_id)


@router.post(
    "/{discussion_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    discussion_id: int,
    payload: MessageCreateRequest,
    session: SessionDep,
    identity: IdentityDep,
) -> MessageResponse:
    """Post to a discussion; members and the group creator only."""

    decision = await can_post_message(session, identity, discussion_id)
    raise_for_decision(decision, "post_message")

    message = DiscussionMessage(
        discussion_id=discussion_id,
        user_id=identity.user_id,
        content=payload.content,
    )
    session.add(message)
    await session.commit()

    (created,) = await _fetch_messages(session, DiscussionMessage.id == message.id)
    return created
