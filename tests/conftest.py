"""Shared fixtures: an in-memory SQLite app, accounts, books and groups."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, TypeVar

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

# Keep the module-level app from opening a log file during collection.
os.environ.setdefault("LOG_FILE", "")

from bookhub.config.settings import DatabaseConfig, SecurityConfig, Settings  # noqa: E402
from bookhub.database import Database  # noqa: E402
from bookhub.main import create_app  # noqa: E402
from bookhub.utils import create_access_token, decode_access_token  # noqa: E402

T = TypeVar("T")

TEST_DSN = "sqlite+aiosqlite://"


def _sqlite_engine() -> AsyncEngine:
    engine = create_async_engine(
        TEST_DSN,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@dataclass
class Account:
    id: int
    username: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        log_file=None,
        database=DatabaseConfig(dsn=TEST_DSN, create_tables=True),
        security=SecurityConfig(
            jwt_secret_key="test-secret",
            access_token_expires_minutes=60,
        ),
    )


@pytest.fixture
def database() -> Database:
    return Database(_sqlite_engine())


@pytest.fixture
def client(settings: Settings, database: Database) -> Iterator[TestClient]:
    app = create_app(settings, database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client: TestClient, settings: Settings) -> Callable[..., Account]:
    def _make_user(username: str, password: str = "secret123") -> Account:
        response = client.post(
            "/api/auth/register",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        token = response.json()["token"]
        user_id = decode_access_token(token, settings.security).user_id
        return Account(id=user_id, username=username, token=token)

    return _make_user


@pytest.fixture
def admin(make_user: Callable[..., Account], settings: Settings) -> Account:
    """A registered account holding a token that carries the admin claim."""

    account = make_user("admin")
    token = create_access_token(account.id, True, settings.security)
    return Account(id=account.id, username=account.username, token=token)


@pytest.fixture
def make_book(client: TestClient, admin: Account) -> Callable[..., dict[str, Any]]:
    def _make_book(
        title: str = "The Hobbit",
        authors: list[str] | None = None,
        topics: list[str] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        payload = {
            "title": title,
            "authors": authors if authors is not None else ["J.R.R. Tolkien"],
            "topics": topics if topics is not None else ["Fantasy", "Adventure"],
            **extra,
        }
        response = client.post("/api/books", json=payload, headers=admin.headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_book


@pytest.fixture
def make_group(client: TestClient) -> Callable[..., dict[str, Any]]:
    def _make_group(
        owner: Account,
        name: str = "Middle-earth Readers",
        description: str | None = "All things Tolkien",
    ) -> dict[str, Any]:
        response = client.post(
            "/api/groups",
            json={"groupName": name, "description": description},
            headers=owner.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make_group


@pytest.fixture
def make_discussion(client: TestClient) -> Callable[..., dict[str, Any]]:
    def _make_discussion(
        author: Account,
        group_id: int,
        book_id: int,
        title: str = "First impressions",
        content: str = "What did everyone think of chapter one?",
    ) -> dict[str, Any]:
        response = client.post(
            f"/api/discussions/{group_id}",
            json={"bookId": book_id, "title": title, "content": content},
            headers=author.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make_discussion


@pytest.fixture
def run_db() -> Callable[[Callable[[AsyncSession], Awaitable[T]]], T]:
    """Run an async callable against a fresh schema and return its result."""

    def _run(work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async def _runner() -> T:
            database = Database(_sqlite_engine())
            await database.create_all()
            try:
                async with database.session_scope() as session:
                    return await work(session)
            finally:
                await database.dispose()

        return asyncio.run(_runner())

    return _run
