"""Unit tests for auth/service.py -- IdentityService.

The service is async; each test drives it with asyncio.run() against an
isolated shared-memory store, so store calls really do hop to a worker
thread and back.

Covers:
- register -> login round trip yields a token for the registered id
- wrong password is Unauthorized, unknown username is NotFound
- storage failures map to operation-specific StorageError messages
- listed profiles never carry a password hash
- similar-username grouping with and without a candidate
"""

import asyncio
from dataclasses import asdict
from unittest.mock import MagicMock

import pytest

from auth.service import IdentityService
from core.errors import NotFound, StorageError, Unauthorized, ValidationError
from storage.store import CredentialStore


@pytest.fixture
def service(store, hasher, tokens) -> IdentityService:
    return IdentityService(store, hasher, tokens)


def _failing_store(**methods) -> MagicMock:
    failing = MagicMock(spec=CredentialStore)
    for name in methods:
        getattr(failing, name).side_effect = StorageError(f"Store operation {name} failed")
    return failing


def test_register_then_login_round_trip(service, tokens):
    registered = asyncio.run(service.register("alice", "Str0ngPW!", "Alice", "A"))
    assert registered.token
    assert tokens.verify(registered.token).user_id == registered.user_id

    logged_in = asyncio.run(service.login("alice", "Str0ngPW!"))
    assert tokens.verify(logged_in.token).user_id == registered.user_id
    assert logged_in.profile.username == "alice"
    assert logged_in.profile.firstname == "Alice"


def test_register_stores_hash_not_plaintext(service, store, hasher):
    asyncio.run(service.register("alice", "Str0ngPW!"))
    stored = store.find_user_by_username("alice")
    assert stored.password_hash != "Str0ngPW!"
    assert hasher.verify("Str0ngPW!", stored.password_hash)


def test_login_wrong_password_is_unauthorized_not_not_found(service):
    asyncio.run(service.register("alice", "Str0ngPW!"))
    with pytest.raises(Unauthorized):
        asyncio.run(service.login("alice", "wrong"))


def test_login_unknown_username_is_not_found(service):
    with pytest.raises(NotFound) as exc_info:
        asyncio.run(service.login("nobody", "whatever"))
    assert exc_info.value.message == "No user found."


@pytest.mark.parametrize("username, password", [("", "pw"), ("alice", ""), (None, "pw")])
def test_register_requires_username_and_password(service, username, password):
    with pytest.raises(ValidationError):
        asyncio.run(service.register(username, password))


def test_register_rejects_password_over_bcrypt_limit(service):
    with pytest.raises(ValidationError):
        asyncio.run(service.register("alice", "é" * 40))  # 80 bytes


def test_duplicate_username_is_generic_creation_failure(service):
    asyncio.run(service.register("alice", "pw1"))
    with pytest.raises(StorageError) as exc_info:
        asyncio.run(service.register("alice", "pw2"))
    assert exc_info.value.message == "Error creating user"


def test_login_storage_failure(hasher, tokens):
    service = IdentityService(_failing_store(find_user_by_username=True), hasher, tokens)
    with pytest.raises(StorageError) as exc_info:
        asyncio.run(service.login("alice", "pw"))
    assert exc_info.value.message == "Error on the server."


def test_list_users_excludes_password_hash(service):
    asyncio.run(service.register("alice", "pw1", "Alice", "A"))
    asyncio.run(service.register("bob", "pw2", "Bob", "B"))

    profiles = asyncio.run(service.list_users())

    assert [p.username for p in profiles] == ["alice", "bob"]
    for profile in profiles:
        fields = asdict(profile)
        assert "password_hash" not in fields
        assert "password" not in fields
        assert fields["created_at"]


def test_list_users_storage_failure(hasher, tokens):
    service = IdentityService(_failing_store(list_users=True), hasher, tokens)
    with pytest.raises(StorageError) as exc_info:
        asyncio.run(service.list_users())
    assert exc_info.value.message == "Error getting users"


def test_find_similar_usernames_groups(service):
    for name in ("john", "johnn", "alice", "mary"):
        asyncio.run(service.register(name, "pw"))

    result = asyncio.run(service.find_similar_usernames())

    assert result.candidate is None
    assert result.groups == [["john", "johnn"]]


def test_find_similar_usernames_for_candidate(service):
    for name in ("john", "alice"):
        asyncio.run(service.register(name, "pw"))

    assert asyncio.run(service.find_similar_usernames("John")).groups == [["john"]]
    assert asyncio.run(service.find_similar_usernames("zelda")).groups == []


def test_find_similar_usernames_storage_failure(hasher, tokens):
    service = IdentityService(_failing_store(list_usernames=True), hasher, tokens)
    with pytest.raises(StorageError) as exc_info:
        asyncio.run(service.find_similar_usernames())
    assert exc_info.value.message == "Database error"
