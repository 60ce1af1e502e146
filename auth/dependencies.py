"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_current_identity() runs the AuthGate stored on app.state against the
request's Authorization header. On success the identity is attached to
request.state.identity and returned; on failure Unauthenticated propagates to
the AppError handler in api/main.py, which answers 401 before the route
handler body runs.

Use as a FastAPI dependency:
    @router.get("/protected")
    async def route(identity: TokenIdentity = Depends(get_current_identity)): ...

or, when the handler does not need the identity itself:
    router = APIRouter(dependencies=[Depends(get_current_identity)])

Layer rule: no imports from catalog/ or storage/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.gate import AuthGate
from auth.models import TokenIdentity


def get_current_identity(request: Request) -> TokenIdentity:
    """Require a valid bearer token. Raises Unauthenticated otherwise."""
    gate: AuthGate = request.app.state.auth_gate
    identity = gate.authenticate(request.headers.get("Authorization"))
    request.state.identity = identity
    return identity
