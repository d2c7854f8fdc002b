"""
tests/conftest.py -- Shared test fixtures for Travel Globe integration tests.

This module provides:
  - make_test_stores(): isolated in-memory DBs for users + travel marks
  - patch_lifespan(): wires test components into app.state, bypassing real startup
  - api_client: TestClient plus a registered user and their bearer token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

DEBUG and RATE_LIMIT_ENABLED must be set before any project import so
get_settings() auto-generates SECRET_KEY and the limiter is built disabled.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set env before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.accounts import register_user
from auth.store import UserStore
from auth.tokens import TokenService
from cache.store import TTLCache
from core.config import Settings
from travel.store import TravelStore

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789"


@dataclass
class ApiContext:
    client: TestClient
    token: str
    user_id: str
    user_store: UserStore
    travel_store: TravelStore
    cache: TTLCache
    tokens: TokenService
    settings: Settings

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_test_stores(db_suffix: str) -> tuple[UserStore, TravelStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so tests don't share
                   state with each other.
    """
    db_url = f"sqlite:///file:test_travelglobe_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=db_url), TravelStore(db_url=db_url)


def make_settings(**overrides) -> Settings:
    values = {"secret_key": TEST_SECRET, "debug": True, "gnews_api_key": ""}
    values.update(overrides)
    return Settings(**values)


def patch_lifespan(
    user_store: UserStore,
    travel_store: TravelStore,
    tokens: TokenService,
    cache: TTLCache,
    settings: Settings,
):
    """Return an async context manager that replaces the real lifespan.

    The purge_task is a long-sleeping coroutine so shutdown can cancel a real
    asyncio.Task.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.tokens = tokens
        app.state.user_store = user_store
        app.state.travel_store = travel_store
        app.state.cache = cache
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def travel_store() -> Generator[TravelStore, None, None]:
    store = TravelStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def api_client(settings: Settings) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext for API integration tests.

    A fresh pair of stores per test keeps travel state from leaking between
    tests. The registered user is traveller@example.com / secret123.
    """
    user_store, travel_store = make_test_stores(uuid.uuid4().hex[:12])
    tokens = TokenService(TEST_SECRET, settings.token_expire_seconds)
    cache = TTLCache()

    user = register_user(user_store, "traveller@example.com", "secret123", "Traveller")
    token = tokens.issue(user.id, user.email)

    app.router.lifespan_context = patch_lifespan(user_store, travel_store, tokens, cache, settings)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(
            client=client,
            token=token,
            user_id=user.id,
            user_store=user_store,
            travel_store=travel_store,
            cache=cache,
            tokens=tokens,
            settings=settings,
        )

    user_store.close()
    travel_store.close()
