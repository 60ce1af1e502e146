"""
auth/service.py -- Registration, login and user listing.

IdentityService orchestrates the Password Hasher, the Token Issuer and the
Credential Store. It receives all three through its constructor; nothing here
reads settings or app state.

Async contract: every store call goes through starlette's run_in_threadpool,
so the request coroutine suspends while SQLite works and resumes with exactly
one outcome -- a value or a raised StorageError. Hashing and token signing
are synchronous CPU work inside the coroutine.

Failure mapping:
  register  -- any StorageError (duplicate username included) -> "Error creating user"
  login     -- unknown username -> NotFound; wrong password -> Unauthorized;
               StorageError -> "Error on the server."
  list      -- StorageError -> "Error getting users"
  similar   -- StorageError -> "Database error"

Login answers NotFound for an unknown username and Unauthorized for a wrong
password. That lets a caller probe which usernames exist; it is the existing
client contract and is kept as-is.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from starlette.concurrency import run_in_threadpool

from auth.models import PublicProfile, User
from auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher
from auth.similarity import group_similar, similar_to
from auth.tokens import TokenIssuer
from core.errors import NotFound, StorageError, Unauthorized, ValidationError
from storage.store import CredentialStore

logger = logging.getLogger("stockroom.auth")


@dataclass(frozen=True)
class RegistrationResult:
    user_id: int
    token: str


@dataclass(frozen=True)
class LoginResult:
    token: str
    profile: PublicProfile


@dataclass
class SimilarUsernames:
    candidate: str | None = None
    groups: list[list[str]] = field(default_factory=list)


class IdentityService:
    def __init__(self, store: CredentialStore, hasher: PasswordHasher, tokens: TokenIssuer) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens

    async def register(
        self,
        username: str,
        password: str,
        firstname: str | None = None,
        lastname: str | None = None,
    ) -> RegistrationResult:
        """Hash, persist, then issue a token for the new user."""
        _require_credentials(username, password)
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        user = User(
            username=username,
            password_hash=self._hasher.hash(password),
            firstname=firstname,
            lastname=lastname,
        )
        try:
            user_id = await run_in_threadpool(self._store.insert_user, user)
        except StorageError as exc:
            logger.warning("Registration failed for username=%r", username)
            raise StorageError("Error creating user") from exc

        logger.info("Registered user id=%d", user_id)
        return RegistrationResult(user_id=user_id, token=self._tokens.issue(user_id))

    async def login(self, username: str, password: str) -> LoginResult:
        """Check credentials and issue a token plus the caller's public profile."""
        _require_credentials(username, password)
        try:
            user = await run_in_threadpool(self._store.find_user_by_username, username)
        except StorageError as exc:
            raise StorageError("Error on the server.") from exc

        if user is None:
            raise NotFound("No user found.")
        if not self._hasher.verify(password, user.password_hash):
            logger.info("Password mismatch for user id=%d", user.id)
            raise Unauthorized()

        return LoginResult(token=self._tokens.issue(user.id), profile=user.public_profile())

    async def list_users(self) -> list[PublicProfile]:
        try:
            users = await run_in_threadpool(self._store.list_users)
        except StorageError as exc:
            raise StorageError("Error getting users") from exc
        return [u.public_profile() for u in users]

    async def find_similar_usernames(self, candidate: str | None = None) -> SimilarUsernames:
        """Group existing usernames that differ only by case or a single edit.

        With a candidate, return one group: the existing usernames near it.
        """
        try:
            usernames = await run_in_threadpool(self._store.list_usernames)
        except StorageError as exc:
            raise StorageError("Database error") from exc

        if candidate:
            matches = similar_to(candidate, usernames)
            return SimilarUsernames(candidate=candidate, groups=[matches] if matches else [])
        return SimilarUsernames(groups=group_similar(usernames))


def _require_credentials(username: str | None, password: str | None) -> None:
    if not username or not password:
        raise ValidationError("Username and password are required")
