"""
auth/passwords.py -- bcrypt password hashing.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection builds a password longer than 72 bytes, which bcrypt 4.x rejects.

bcrypt only looks at the first 72 bytes of its input and current releases
raise on anything longer. The Identity Service rejects such passwords before
they reach hash(); see MAX_PASSWORD_BYTES.

Layer rule: no imports from api/, catalog/, or storage/.
"""

from __future__ import annotations

import logging

import bcrypt

from core.errors import InternalError

logger = logging.getLogger("stockroom.auth")

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted, adaptive one-way hashing for plaintext passwords.

    rounds is bcrypt's log2 work factor. Every hash embeds its own salt and
    cost, so changing rounds later does not invalidate stored hashes.
    """

    def __init__(self, rounds: int = 8) -> None:
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of plain. A new salt is drawn on every call.

        Failures inside bcrypt are surfaced as InternalError rather than
        defaulting to any accept/reject outcome.
        """
        try:
            return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")
        except Exception as exc:
            logger.error("Password hashing failed: %s", type(exc).__name__)
            raise InternalError("Password hashing failed") from exc

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches hashed. Never raises."""
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except Exception:
            return False
