"""Constants and builders shared by test modules and conftest.py."""

from __future__ import annotations

import uuid

from sqlalchemy.pool import SingletonThreadPool

from core.config import Settings
from storage.store import CredentialStore

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"
OTHER_SECRET = "another-secret-key-that-is-long-enough-9876543210"


def memory_db_url(name: str = "") -> str:
    """Return a named shared-memory SQLite URL unique to this call."""
    return f"sqlite:///file:test_{name}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


def memory_store(name: str = "") -> CredentialStore:
    """Open a CredentialStore on a fresh shared-memory database.

    The pool is named explicitly. Each thread keeps its own connection, and
    the shared cache lets the threadpool workers see the same tables.
    """
    return CredentialStore(memory_db_url(name), poolclass=SingletonThreadPool)


def make_settings(**overrides) -> Settings:
    values = {
        "debug": True,
        "secret_key": TEST_SECRET,
        "bcrypt_rounds": 4,
        "seed_on_startup": False,
        "database_url": memory_db_url("settings"),
    }
    values.update(overrides)
    return Settings(**values)
