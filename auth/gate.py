"""
auth/gate.py -- The authentication gate in front of every protected route.

The gate is deliberately framework-free: it takes the raw Authorization
header value and returns a TokenIdentity or raises Unauthenticated.
auth/dependencies.py adapts it to FastAPI's Depends() system.

Header parsing keeps the legacy tolerance: "Bearer <token>" is the expected
form, but a value without the prefix is handed to the verifier whole. A
malformed value then fails verification and gets the same rejection as a
bad token.

The gate never touches the database. A token for a user that has since been
removed still passes until it expires.

Layer rule: no imports from api/, catalog/, or storage/.
"""

from __future__ import annotations

import logging

from auth.models import TokenIdentity
from auth.tokens import TokenIssuer
from core.errors import Unauthenticated

logger = logging.getLogger("stockroom.auth")

NO_TOKEN_MESSAGE = "No token provided"
INVALID_TOKEN_MESSAGE = "Failed to authenticate token"

_BEARER_PREFIX = "Bearer "


class AuthGate:
    def __init__(self, verifier: TokenIssuer) -> None:
        self._verifier = verifier

    def authenticate(self, authorization: str | None) -> TokenIdentity:
        """Resolve an Authorization header value to a verified identity.

        Raises:
            Unauthenticated("No token provided") if the header is absent or empty.
            Unauthenticated("Failed to authenticate token") on any verification failure.
        """
        if not authorization:
            raise Unauthenticated(NO_TOKEN_MESSAGE)

        token = authorization[len(_BEARER_PREFIX) :] if authorization.startswith(_BEARER_PREFIX) else authorization

        identity = self._verifier.verify(token)
        if identity is None:
            logger.info("Rejected request with invalid or expired token")
            raise Unauthenticated(INVALID_TOKEN_MESSAGE)
        return identity
