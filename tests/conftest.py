"""
tests/conftest.py -- Shared test fixtures for Zela API integration tests.

This module provides:
  - make_test_stores(): an isolated SQLite file DB with both stores on one Engine
  - patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient over the real app with isolated stores
  - stores: (user_store, stats_store) on a fresh DB for store-level tests
  - FakeUserStore: dict-backed stand-in for UserStore in gateway unit tests

Design: each fixture gets its own SQLite *file* under pytest's tmp dir rather
than a ':memory:' DB. Route handlers and the statistics queries run on worker
threads, and a plain in-memory SQLite DB is private to a single connection,
so the other threads would see a blank schema.

No environment variables are needed: api.main reads Settings only inside the
real lifespan, which these fixtures replace.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from api.main import app
from auth.gateway import AuthGateway
from auth.models import User
from auth.store import UserStore
from core.database import create_db_engine
from stats.store import StatsStore

TEST_SECRET = "tests-secret-key-0123456789abcdef0123456789"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_test_stores(db_dir: Path) -> tuple[Engine, UserStore, StatsStore]:
    """Create an Engine on a fresh SQLite file plus both stores sharing it."""
    engine = create_db_engine(f"sqlite:///{db_dir / 'zela_test.db'}")
    return engine, UserStore(engine), StatsStore(engine)


def patch_lifespan(gateway: AuthGateway, stats_store: StatsStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test objects into app.state so TestClient routes see
    isolated test DBs rather than whatever DATABASE_URL points at.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.gateway = gateway
        app.state.stats_store = stats_store
        yield

    return test_lifespan


class FakeUserStore:
    """In-memory UserStore substitute. Enforces email uniqueness like the real schema."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.raise_on_create: Exception | None = None

    def create_user(self, user: User) -> User:
        if self.raise_on_create is not None:
            raise self.raise_on_create
        if user.email in self.users:
            raise IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email"))
        stored = User(
            id=len(self.users) + 1,
            name=user.name,
            email=user.email,
            role=user.role,
            password_hash=user.password_hash,
            created_at="2024-01-01T00:00:00+00:00",
        )
        self.users[user.email] = stored
        return stored

    def get_by_email(self, email: str) -> User | None:
        return self.users.get(email)


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(tmp_path_factory) -> Generator[tuple[TestClient, AuthGateway, StatsStore], None, None]:
    """Yield (client, gateway, stats_store) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use an isolated database.
    """
    engine, user_store, stats_store = make_test_stores(tmp_path_factory.mktemp("api"))
    gateway = AuthGateway(user_store, secret_key=TEST_SECRET)

    app.router.lifespan_context = patch_lifespan(gateway, stats_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, gateway, stats_store

    engine.dispose()


@pytest.fixture
def fake_store() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture
def gateway(fake_store: FakeUserStore) -> AuthGateway:
    return AuthGateway(fake_store, secret_key=TEST_SECRET)


@pytest.fixture
def secret_key() -> str:
    return TEST_SECRET


@pytest.fixture
def stores(tmp_path) -> Generator[tuple[UserStore, StatsStore], None, None]:
    """Yield (user_store, stats_store) on a fresh SQLite file for store-level tests."""
    engine, user_store, stats_store = make_test_stores(tmp_path)
    yield user_store, stats_store
    engine.dispose()
