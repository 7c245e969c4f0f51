"""Service layer: authorization predicates, access decisions and catalog helpers."""

from .access import Decision, Outcome
from .catalog import CatalogEntry, ingest_book, split_authors, split_topics, summarize_books

__all__ = [
    "Decision",
    "Outcome",
    "CatalogEntry",
    "ingest_book",
    "split_authors",
    "split_topics",
    "summarize_books",
]
