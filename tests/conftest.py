"""
tests/conftest.py -- Shared test fixtures for Stockroom tests.

This module provides:
  - store / hasher / tokens fixtures for unit tests (URLs and settings from helpers.py)
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client: TestClient with a pre-registered user and its token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because the services run store calls in a worker thread (run_in_threadpool)
and TestClient runs route handlers in a thread pool. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread. The
named URI format (file:name?mode=memory&cache=shared&uri=true) shares one
in-memory instance across all connections in the same process.

The DEBUG env var must be set before api.main is imported: the CORS setup
reads get_settings() at import time, and DEBUG=true lets it auto-generate a
SECRET_KEY instead of raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_components
from auth.models import User
from auth.passwords import PasswordHasher
from auth.tokens import TokenIssuer
from core.config import Settings
from helpers import TEST_SECRET, make_settings, memory_store
from storage.store import CredentialStore

# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[CredentialStore, None, None]:
    s = memory_store("store")
    yield s
    s.close()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, expires_in=86400)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(store: CredentialStore, settings: Settings):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test store into app.state so TestClient routes see
    an isolated test DB rather than the production database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        wire_components(app, store, settings)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use an isolated in-memory store.
    The user "testuser" / "testpass123" exists before the client starts.
    """
    settings = make_settings()
    store = memory_store("api")

    uid = store.insert_user(
        User(
            username="testuser",
            password_hash=PasswordHasher(rounds=4).hash("testpass123"),
            firstname="Test",
            lastname="User",
        )
    )
    token = TokenIssuer(settings.secret_key, settings.token_expire_seconds).issue(uid)

    app.router.lifespan_context = _patch_lifespan(store, settings)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid

    store.close()
