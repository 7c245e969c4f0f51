"""Seed the database with the admin account and the book catalog.

Usage:
    python -m scripts.seed_database [--reset] [--books books_data.json]

The books file is a JSON list of objects with ``title``, ``coverUrl``,
``firstPublished``, ``synopsis``, ``author`` (comma separated) and
``topics`` (string or list of strings).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Mapping

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.config.settings import SeedConfig, get_settings
from bookhub.database import Database
from bookhub.models.user import User
from bookhub.services.catalog import ingest_book, split_authors, split_topics
from bookhub.utils import hash_password

logger = logging.getLogger("bookhub.scripts.seed")


def parse_book_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Normalise one entry of the books file into ``ingest_book`` arguments."""

    year_raw = record.get("firstPublished")
    try:
        year_published = int(str(year_raw).strip()[:4]) if year_raw else None
    except ValueError:
        year_published = None

    cover = record.get("coverUrl")
    synopsis = record.get("synopsis")
    return {
        "title": str(record["title"]).strip(),
        "cover_image": cover.strip() if isinstance(cover, str) and cover.strip() else None,
        "year_published": year_published,
        "synopsis": synopsis.strip() if isinstance(synopsis, str) and synopsis.strip() else None,
        "authors": split_authors(record.get("author")),
        "topics": split_topics(record.get("topics")),
    }


async def seed_admin(session: AsyncSession, config: SeedConfig) -> bool:
    """Create the admin account unless its email is already registered."""

    existing = await session.execute(
        select(User.id).where(func.lower(User.email) == config.admin_email.lower())
    )
    if existing.first() is not None:
        logger.info("Admin %s already present; skipping", config.admin_email)
        return False

    session.add(
        User(
            username=config.admin_username,
            email=config.admin_email,
            password_hash=hash_password(config.admin_password.get_secret_value()),
            is_admin=True,
        )
    )
    await session.commit()
    logger.info("Admin user %s seeded", config.admin_username)
    return True


async def import_books(database: Database, records: Iterable[Mapping[str, Any]]) -> int:
    """Insert every record, one transaction per book; return the count imported."""

    imported = 0
    for index, record in enumerate(records):
        try:
            arguments = parse_book_record(record)
        except KeyError:
            logger.warning("Skipping book #%d without a title", index)
            continue

        async with database.session_scope() as session:
            await ingest_book(session, **arguments)
            await session.commit()
        imported += 1

    logger.info("Imported %d books", imported)
    return imported


def load_books_file(path: Path) -> list[dict[str, Any]]:
    with path.open(encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of books")
    return data


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the Fantasy Book Hub database.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate every table before seeding.",
    )
    parser.add_argument(
        "--books",
        type=Path,
        default=None,
        help="Path to the books JSON file (defaults to SEED_BOOKS_FILE).",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    database = Database.from_config(settings.database)

    try:
        if args.reset:
            await database.drop_all()
        await database.create_all()

        async with database.session_scope() as session:
            await seed_admin(session, settings.seed)

        books_path = args.books or Path(settings.seed.books_file)
        if books_path.exists():
            await import_books(database, load_books_file(books_path))
        else:
            logger.warning("Books file %s not found; skipping catalog import", books_path)
    finally:
        await database.dispose()

    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    sys.exit(asyncio.run(main()))
