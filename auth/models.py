"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic beyond the profile view).
Mirrors catalog/models.py -- dataclasses own domain shape; the store and
services do the work.

Layer rule: no imports from api/, catalog/, or storage/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A persisted identity.

    password_hash is the bcrypt string written by PasswordHasher.hash(). It
    never leaves the service layer: anything handed to a caller goes through
    public_profile() first.

    id and created_at are None before the record is written to the database.
    """

    username: str
    password_hash: str
    firstname: str | None = None
    lastname: str | None = None
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert

    def public_profile(self) -> PublicProfile:
        return PublicProfile(
            id=self.id,
            username=self.username,
            firstname=self.firstname,
            lastname=self.lastname,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class PublicProfile:
    """A User without the password hash. The only user shape callers see."""

    id: int
    username: str
    firstname: str | None
    lastname: str | None
    created_at: str | None


@dataclass(frozen=True)
class TokenIdentity:
    """The decoded, verified contents of a session token.

    Request-scoped: the gate attaches one to request.state and it is dropped
    when the request ends. issued_at / expires_at are Unix seconds.
    """

    user_id: int
    issued_at: int
    expires_at: int
