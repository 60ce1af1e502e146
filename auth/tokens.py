"""
auth/tokens.py -- Session token issue and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the process secret and
       carry sub (stringified user id), user_id, iat and exp. Nothing is
       persisted; the token itself is the session.

  Expiry: exp is exactly iat + expires_in. A token verifies strictly before
       exp and fails at or after it. python-jose's own exp check tolerates
       now == exp, so it is disabled and the comparison is done here against
       the injected clock.

  Verification is one pass: decode + signature, claim shape, expiry. Every
       failure collapses to None -- callers cannot tell an expired token from
       a forged one, and the gate maps both to the same 401.

  Secret rotation: tokens signed with a previous secret fail the signature
       check, so rotating SECRET_KEY logs everyone out.

Layer rule: no imports from api/, catalog/, or storage/.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from jose import JWTError, jwt

from auth.models import TokenIdentity
from core.errors import InternalError

logger = logging.getLogger("stockroom.auth")

_ALGORITHM = "HS256"

DEFAULT_EXPIRES_IN = 86400


class TokenIssuer:
    """Mints and verifies signed, time-bounded identity assertions.

    Usage:
        issuer = TokenIssuer(settings.secret_key, settings.token_expire_seconds)
        token = issuer.issue(user_id)
        identity = issuer.verify(token)   # TokenIdentity or None
    """

    def __init__(
        self,
        secret_key: str,
        expires_in: int = DEFAULT_EXPIRES_IN,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if expires_in <= 0:
            raise ValueError("expires_in must be positive")
        self._secret_key = secret_key
        self.expires_in = expires_in
        self._clock = clock

    def issue(self, user_id: int) -> str:
        """Encode a signed JWT for user_id, expiring expires_in seconds from now."""
        issued_at = int(self._clock())
        payload = {
            "sub": str(user_id),
            "user_id": user_id,
            "iat": issued_at,
            "exp": issued_at + self.expires_in,
        }
        try:
            return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)
        except JWTError as exc:
            logger.error("Token signing failed: %s", type(exc).__name__)
            raise InternalError("Token signing failed") from exc

    def verify(self, token: str) -> TokenIdentity | None:
        """Decode and verify a JWT. Returns the identity or None on any failure."""
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError:
            return None

        user_id = payload.get("user_id")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if not all(_is_int(v) for v in (user_id, issued_at, expires_at)):
            return None
        if self._clock() >= expires_at:
            return None
        return TokenIdentity(user_id=user_id, issued_at=issued_at, expires_at=expires_at)


def _is_int(value) -> bool:
    # bool is an int subclass; a claim of `true` is not a user id.
    return isinstance(value, int) and not isinstance(value, bool)
