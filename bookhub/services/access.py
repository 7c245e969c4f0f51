"""Access-control decisions for group, discussion, message and review operations.

Each function resolves whether the target exists before evaluating any
ownership or membership predicate, and returns a :class:`Decision` rather than
raising. The HTTP layer turns a denied decision into an error response in one
place (``bookhub.controllers.dependencies.raise_for_decision``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.services import predicates
from bookhub.utils.security import Identity


class Outcome(str, Enum):
    ALLOWED = "allowed"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Decision:
    """Result of an access check, with a user-facing message when denied."""

    outcome: Outcome
    message: str = ""

    @property
    def allowed(self) -> bool:
        return self.outcome is Outcome.ALLOWED


ALLOW = Decision(Outcome.ALLOWED)


def deny(message: str) -> Decision:
    return Decision(Outcome.UNAUTHORIZED, message)


def not_found(message: str) -> Decision:
    return Decision(Outcome.NOT_FOUND, message)


def bad_request(message: str) -> Decision:
    return Decision(Outcome.BAD_REQUEST, message)


_GROUP_NOT_FOUND = "Discussion group not found."
_DISCUSSION_NOT_FOUND = "Discussion not found."


async def _member_or_creator(
    session: AsyncSession,
    group_id: int,
    user_id: int,
) -> bool:
    if await predicates.is_user_in_group(session, group_id, user_id):
        return True
    return await predicates.is_group_creator(session, group_id, user_id)


async def account_active(session: AsyncSession, identity: Identity) -> Decision:
    """Gate for writes that reference the caller's user row."""

    if await predicates.user_exists(session, identity.user_id):
        return ALLOW
    return deny("You must be logged in.")


def admin_only(identity: Identity) -> Decision:
    """Role gate for catalog writes, user listing and user deletion."""

    if identity.is_admin:
        return ALLOW
    return deny("Admins only.")


def can_access_user(identity: Identity, user_id: int) -> Decision:
    """Users may read and edit their own profile; admins may act on anyone."""

    if identity.is_admin or identity.user_id == user_id:
        return ALLOW
    return deny("Unauthorized")


async def can_manage_group(
    session: AsyncSession,
    identity: Identity,
    group_id: int,
    action: str = "update",
) -> Decision:
    if not await predicates.group_exists(session, group_id):
        return not_found("Group not found.")
    if identity.is_admin:
        return ALLOW
    if await predicates.is_group_owner(session, group_id, identity.user_id):
        return ALLOW
    return deny(f"You do not have permission to {action} this group.")


async def can_join_group(
    session: AsyncSession,
    identity: Identity,
    group_id: int,
) -> Decision:
    account = await account_active(session, identity)
    if not account.allowed:
        return account
    if not await predicates.group_exists(session, group_id):
        return not_found(_GROUP_NOT_FOUND)
    if await predicates.is_user_in_group(session, group_id, identity.user_id):
        return bad_request("User is already in the group.")
    return ALLOW


async def can_leave_group(
    session: AsyncSession,
    identity: Identity,
    group_id: int,
) -> Decision:
    if not await predicates.group_exists(session, group_id):
        return not_found(_GROUP_NOT_FOUND)
    if not await predicates.is_user_in_group(session, group_id, identity.user_id):
        return bad_request("User is not a member of this group.")
    return ALLOW


async def can_view_group_discussions(
    session: AsyncSession,
    identity: Identity,
    group_id: int,
) -> Decision:
    if not await predicates.group_exists(session, group_id):
        return not_found(_GROUP_NOT_FOUND)
    if identity.is_admin:
        return ALLOW
    if await _member_or_creator(session, group_id, identity.user_id):
        return ALLOW
    return deny("You must be a group member or an admin to view discussions.")


async def can_create_discussion(
    session: AsyncSession,
    identity: Identity,
    group_id: int,
) -> Decision:
    # Admins get no bypass here; posting requires taking part in the group.
    if not await predicates.group_exists(session, group_id):
        return not_found(_GROUP_NOT_FOUND)
    if await _member_or_creator(session, group_id, identity.user_id):
        return ALLOW
    return deny("You must be a group member to create discussions.")


async def can_view_discussion(
    session: AsyncSession,
    identity: Identity,
    discussion_id: int,
) -> Decision:
    group_id = await predicates.discussion_group_id(session, discussion_id)
    if group_id is None:
        return not_found(_DISCUSSION_NOT_FOUND)
    return await can_view_group_discussions(session, identity, group_id)


async def can_manage_discussion(
    session: AsyncSession,
    identity: Identity,
    discussion_id: int,
    action: str = "update",
) -> Decision:
    if await predicates.discussion_group_id(session, discussion_id) is None:
        return not_found(_DISCUSSION_NOT_FOUND)
    if identity.is_admin:
        return ALLOW
    if await predicates.is_discussion_creator(session, discussion_id, identity.user_id):
        return ALLOW
    group_creator = await predicates.get_group_creator_by_discussion(
        session, discussion_id
    )
    if group_creator is not None and group_creator == identity.user_id:
        return ALLOW
    return deny(f"You do not have permission to {action} this discussion.")


async def can_view_messages(
    session: AsyncSession,
    identity: Identity,
    discussion_id: int,
) -> Decision:
    group_id = await predicates.discussion_group_id(session, discussion_id)
    if group_id is None:
        return not_found(_DISCUSSION_NOT_FOUND)
    if identity.is_admin:
        return ALLOW
    if await _member_or_creator(session, group_id, identity.user_id):
        return ALLOW
    return deny(
        "You must be a group member, the group creator, or an admin to view messages."
    )


async def can_post_message(
    session: AsyncSession,
    identity: Identity,
    discussion_id: int,
) -> Decision:
    group_id = await predicates.discussion_group_id(session, discussion_id)
    if group_id is None:
        return not_found(_DISCUSSION_NOT_FOUND)
    if await _member_or_creator(session, group_id, identity.user_id):
        return ALLOW
    return deny("Only group members or the group creator can add messages.")


async def can_update_review(
    session: AsyncSession,
    identity: Identity,
    review_id: int,
) -> Decision:
    """Only the author may edit a review; being an admin is not enough."""

    is_owner = await predicates.is_review_owner(session, review_id, identity.user_id)
    if is_owner is None:
        return not_found(f"Review with ID {review_id} not found.")
    if not is_owner:
        return deny("You do not have permission to update this review.")
    return ALLOW


async def can_delete_review(
    session: AsyncSession,
    identity: Identity,
    review_id: int,
) -> Decision:
    is_owner = await predicates.is_review_owner(session, review_id, identity.user_id)
    if is_owner is None:
        return not_found(f"Review with ID {review_id} not found.")
    if identity.is_admin or is_owner:
        return ALLOW
    return deny("You do not have permission to delete this review.")


__all__ = [
    "ALLOW",
    "Decision",
    "Outcome",
    "account_active",
    "admin_only",
    "bad_request",
    "can_access_user",
    "can_create_discussion",
    "can_delete_review",
    "can_join_group",
    "can_leave_group",
    "can_manage_discussion",
    "can_manage_group",
    "can_post_message",
    "can_update_review",
    "can_view_discussion",
    "can_view_group_discussions",
    "can_view_messages",
    "deny",
    "not_found",
]
