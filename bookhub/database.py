"""Database engine and session management for the MVC layout."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from bookhub.config.settings import DatabaseConfig

# Import models so they are attached to Base.metadata before table creation
from bookhub.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and hands out sessions.

    Instances are created once at startup and passed to ``create_app`` so
    request handlers never reach for a module-level connection pool.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )

    @classmethod
    def from_config(cls, config: DatabaseConfig, *, echo: bool = False) -> "Database":
        """Create an engine with environment-appropriate pooling."""

        engine_options: dict[str, Any] = {
            "echo": echo,
            "future": True,
            "pool_pre_ping": True,
        }

        if config.serverless:
            # Disable pooling when working with serverless databases.
            engine_options["poolclass"] = NullPool

        return cls(create_async_engine(config.url, **engine_options))

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Async context manager that yields a SQLAlchemy session."""

        async with self.session_factory() as session:
            yield session

    async def create_all(self) -> None:
        """Create database tables if they do not exist."""

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Ensured database tables exist.")

    async def drop_all(self) -> None:
        """Drop every table known to the metadata."""

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("Dropped all database tables.")

    async def dispose(self) -> None:
        """Dispose of the engine and release pooled connections."""

        await self.engine.dispose()


__all__ = ["Database"]
