"""Pydantic schemas used as views in the MVC architecture."""

from .auth import LoginRequest, LoginResponse, RegisterRequest, TokenResponse
from .authors import AuthorBookRef, AuthorDetailsResponse, AuthorResponse
from .books import (
    BookCreateRequest,
    BookDetail,
    BookGroupRef,
    BookListResponse,
    BookSearchResult,
    BookSummary,
)
from .common import ErrorDetail, ErrorResponse, SuccessResponse
from .discussions import (
    DiscussionBook,
    DiscussionCreateRequest,
    DiscussionResponse,
    DiscussionUpdateRequest,
)
from .groups import (
    GroupCreateRequest,
    GroupMemberResponse,
    GroupResponse,
    GroupUpdateRequest,
    JoinGroupResponse,
    MembershipStatusResponse,
)
from .messages import MessageCreateRequest, MessageResponse
from .reviews import ReviewCreateRequest, ReviewResponse, ReviewUpdateRequest
from .topics import TopicBookRef, TopicDetailsResponse, TopicResponse
from .users import UserResponse, UserUpdateRequest

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "TokenResponse",
    "AuthorBookRef",
    "AuthorDetailsResponse",
    "AuthorResponse",
    "BookCreateRequest",
    "BookDetail",
    "BookGroupRef",
    "BookListResponse",
    "BookSearchResult",
    "BookSummary",
    "ErrorDetail",
    "ErrorResponse",
    "SuccessResponse",
    "DiscussionBook",
    "DiscussionCreateRequest",
    "DiscussionResponse",
    "DiscussionUpdateRequest",
    "GroupCreateRequest",
    "GroupMemberResponse",
    "GroupResponse",
    "GroupUpdateRequest",
    "JoinGroupResponse",
    "MembershipStatusResponse",
    "MessageCreateRequest",
    "MessageResponse",
    "ReviewCreateRequest",
    "ReviewResponse",
    "ReviewUpdateRequest",
    "TopicBookRef",
    "TopicDetailsResponse",
    "TopicResponse",
    "UserResponse",
    "UserUpdateRequest",
]
