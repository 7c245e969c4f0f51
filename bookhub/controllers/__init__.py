"""FastAPI routers acting as controllers in the MVC architecture."""

from . import (
    auth,
    authors,
    books,
    discussions,
    groups,
    messages,
    reviews,
    topics,
    users,
)

__all__ = [
    "auth",
    "authors",
    "books",
    "discussions",
    "groups",
    "messages",
    "reviews",
    "topics",
    "users",
]
