"""Unit tests for auth/tokens.py -- token issue, expiry, and signature checks."""

import pytest
from jose import jwt

from auth.tokens import TokenIssuer
from helpers import OTHER_SECRET, TEST_SECRET


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_issue_then_verify_round_trips_user_id(tokens):
    identity = tokens.verify(tokens.issue(42))
    assert identity is not None
    assert identity.user_id == 42


def test_expiry_is_exactly_expires_in_after_issue():
    clock = FakeClock(1_700_000_000)
    issuer = TokenIssuer(TEST_SECRET, expires_in=86400, clock=clock)
    identity = issuer.verify(issuer.issue(7))
    assert identity.issued_at == 1_700_000_000
    assert identity.expires_at - identity.issued_at == 86400


def test_token_valid_strictly_before_expiry_and_invalid_at_expiry():
    clock = FakeClock(1_000_000)
    issuer = TokenIssuer(TEST_SECRET, expires_in=100, clock=clock)
    token = issuer.issue(1)

    clock.now = 1_000_099.999
    assert issuer.verify(token) is not None

    clock.now = 1_000_100
    assert issuer.verify(token) is None

    clock.now = 1_000_500
    assert issuer.verify(token) is None


def test_wrong_secret_fails_verification():
    issued = TokenIssuer(OTHER_SECRET).issue(1)
    assert TokenIssuer(TEST_SECRET).verify(issued) is None


def test_tampered_payload_fails_verification(tokens):
    header, payload, signature = tokens.issue(1).split(".")
    forged_payload = jwt.encode({"user_id": 2}, "x" * 32, algorithm="HS256").split(".")[1]
    assert tokens.verify(".".join([header, forged_payload, signature])) is None


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer", "InvalidFormat"])
def test_malformed_token_fails_verification(tokens, garbage):
    assert tokens.verify(garbage) is None


def test_token_missing_claims_fails_verification():
    token = jwt.encode({"sub": "1"}, TEST_SECRET, algorithm="HS256")
    assert TokenIssuer(TEST_SECRET).verify(token) is None


def test_non_integer_user_id_fails_verification():
    token = jwt.encode({"user_id": "1", "iat": 0, "exp": 4_000_000_000}, TEST_SECRET, algorithm="HS256")
    assert TokenIssuer(TEST_SECRET).verify(token) is None


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenIssuer("")
