"""
api/routes/users.py -- Registration, login and user listing endpoints.

Routes:
  POST /api/auth/register           -- create account; 201 {auth, token}
  POST /api/auth/login              -- password login; 200 {auth, token, user}
  GET  /api/auth/users              -- list public profiles (requires auth)
  GET  /api/auth/similar-usernames  -- near-duplicate username groups (requires auth)
  GET  /api/auth/me                 -- identity decoded from the caller's token (requires auth)

Failures other than a wrong password are raised as AppError subclasses and
rendered by the handler in api/main.py. A wrong password is answered here
with the {auth: false, token: null} body the client expects.

Token responses carry Cache-Control: no-store.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from api.models import (
    AuthResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RegisterRequest,
    SimilarUsernamesResponse,
    UserProfileResponse,
)
from auth.dependencies import get_current_identity
from auth.models import TokenIdentity
from auth.service import IdentityService
from core.errors import Unauthorized

# Auth policy:
# - POST /api/auth/register:          public -- creating an account needs no prior auth
# - POST /api/auth/login:             public -- login endpoint must be unauthenticated
# - GET  /api/auth/users:             requires auth (get_current_identity)
# - GET  /api/auth/similar-usernames: requires auth (get_current_identity)
# - GET  /api/auth/me:                requires auth (get_current_identity)
router = APIRouter(prefix="/auth")


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create a user and return a token for it.

    A duplicate username is reported as a generic creation failure (500),
    the same as any other storage error.
    """
    identity: IdentityService = request.app.state.identity_service
    result = await identity.register(body.username, body.password, body.firstname, body.lastname)
    resp = JSONResponse(status_code=201, content=AuthResponse(auth=True, token=result.token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/login", response_model=LoginResponse)
async def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password.

    Unknown username -> 404 {"error": "No user found."}.
    Wrong password   -> 401 {"auth": false, "token": null}.
    """
    identity: IdentityService = request.app.state.identity_service
    try:
        result = await identity.login(body.username, body.password)
    except Unauthorized:
        resp = JSONResponse(status_code=401, content=AuthResponse(auth=False, token=None).model_dump())
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            auth=True,
            token=result.token,
            user=UserProfileResponse.from_profile(result.profile),
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/users", response_model=list[UserProfileResponse], dependencies=[Depends(get_current_identity)])
async def list_users(request: Request) -> list[UserProfileResponse]:
    """List every user's public profile in creation order."""
    identity: IdentityService = request.app.state.identity_service
    return [UserProfileResponse.from_profile(p) for p in await identity.list_users()]


@router.get(
    "/similar-usernames",
    response_model=SimilarUsernamesResponse,
    dependencies=[Depends(get_current_identity)],
)
async def similar_usernames(
    request: Request,
    username: Optional[str] = Query(default=None, max_length=255),
) -> SimilarUsernamesResponse:
    """Group usernames that differ only by case or one character.

    With ?username=, return the existing usernames close to that candidate.
    """
    identity: IdentityService = request.app.state.identity_service
    result = await identity.find_similar_usernames(username)
    return SimilarUsernamesResponse(candidate=result.candidate, groups=result.groups)


@router.get("/me", response_model=MeResponse)
async def me(current: TokenIdentity = Depends(get_current_identity)) -> MeResponse:
    return MeResponse(id=current.user_id, issued_at=current.issued_at, expires_at=current.expires_at)
