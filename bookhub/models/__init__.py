"""SQLAlchemy models for the MVC architecture."""

from .base import Base
from .book import Author, Book, Topic, book_authors, book_topics  # noqa: F401
from .discussion import GroupDiscussion  # noqa: F401
from .group import DiscussionGroup  # noqa: F401
from .group_membership import GroupMembership  # noqa: F401
from .message import DiscussionMessage  # noqa: F401
from .review import Review  # noqa: F401
from .user import User  # noqa: F401

__all__ = [
    "Base",
    "User",
    "Author",
    "Book",
    "Topic",
    "book_authors",
    "book_topics",
    "Review",
    "DiscussionGroup",
    "GroupMembership",
    "GroupDiscussion",
    "DiscussionMessage",
]
