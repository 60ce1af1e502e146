"""Unit tests for auth/passwords.py -- bcrypt hashing and verification."""

from unittest.mock import patch

import pytest

from auth.passwords import PasswordHasher
from core.errors import InternalError


def test_hash_is_salted(hasher):
    """The same password hashes differently each time, and both hashes verify."""
    first = hasher.hash("Str0ngPW!")
    second = hasher.hash("Str0ngPW!")
    assert first != second
    assert hasher.verify("Str0ngPW!", first)
    assert hasher.verify("Str0ngPW!", second)


def test_hash_never_contains_plaintext(hasher):
    assert "Str0ngPW!" not in hasher.hash("Str0ngPW!")


def test_verify_rejects_wrong_password(hasher):
    hashed = hasher.hash("correct horse")
    assert hasher.verify("battery staple", hashed) is False


@pytest.mark.parametrize("bad_hash", ["", "not-a-bcrypt-hash", "$2b$04$tooshort", None])
def test_verify_malformed_hash_returns_false(hasher, bad_hash):
    assert hasher.verify("anything", bad_hash) is False


def test_rounds_are_embedded_in_hash():
    assert PasswordHasher(rounds=5).hash("pw").startswith("$2b$05$")


def test_hash_failure_raises_internal_error(hasher):
    with patch("auth.passwords.bcrypt.hashpw", side_effect=MemoryError()):
        with pytest.raises(InternalError):
            hasher.hash("pw")
