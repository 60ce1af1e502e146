"""
core/errors.py -- Error taxonomy shared by every layer.

Each error carries the message the client sees and the HTTP status it maps
to. Services raise these; api/main.py turns them into {"error": message}
responses in one exception handler, so route code never builds error bodies
by hand.

Storage-caused failures are re-raised as StorageError with an operation
specific message, chained to the original exception. The chain is logged
server-side; only the message reaches the client.

Layer rule: core/ is the kernel. No imports from api/, auth/, catalog/, or storage/.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for all expected, client-reportable failures."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """A required input is missing or malformed."""

    status_code = 400
    default_message = "Invalid request"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Unauthorized(AppError):
    """Credentials were checked and did not match."""

    status_code = 401
    default_message = "Invalid credentials"


class Unauthenticated(AppError):
    """The request carries no usable bearer token."""

    status_code = 401
    default_message = "Failed to authenticate token"


class StorageError(AppError):
    """The persistent store failed. Not subdivided further."""

    status_code = 500
    default_message = "Database error"


class InternalError(AppError):
    """Hashing or signing failed unexpectedly."""

    status_code = 500
    default_message = "Internal server error"
