"""
api/main.py -- FastAPI application entry point for Stockroom.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. CORSMiddleware   -- adds CORS headers for the browser client's origins
  2. log_requests     -- one access-log line per request with latency

Lifespan handles startup (settings, store, seed, component wiring) and
shutdown (dispose the store's engine) symmetrically. Every component gets its
configuration through its constructor here; nothing below this module reads
settings on its own.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.products import router as products_router
from api.routes.users import router as users_router
from auth.gate import AuthGate
from auth.passwords import PasswordHasher
from auth.service import IdentityService
from auth.tokens import TokenIssuer
from catalog.service import ProductService
from core.config import Settings, get_settings
from core.errors import AppError, StorageError
from storage.seed import seed_if_empty
from storage.store import CredentialStore

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("stockroom.api")


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def wire_components(app: FastAPI, store: CredentialStore, settings: Settings) -> None:
    """Build the auth and catalog components around one store and attach them to app.state.

    Shared by the lifespan and by tests, which pass an isolated in-memory
    store and test settings.
    """
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    tokens = TokenIssuer(settings.secret_key, expires_in=settings.token_expire_seconds)
    app.state.store = store
    app.state.password_hasher = hasher
    app.state.token_issuer = tokens
    app.state.auth_gate = AuthGate(tokens)
    app.state.identity_service = IdentityService(store, hasher, tokens)
    app.state.product_service = ProductService(store)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the store once for the process lifetime and wire everything to it.

    Startup order matters:
      1. Settings first -- a missing SECRET_KEY in production stops here.
      2. Store second -- creates the schema on first run.
      3. Components third -- hasher, issuer, gate and services share the store.
      4. Seed last -- needs the store and the hasher.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info("Stockroom API starting up")

    store = CredentialStore(settings.database_url)
    wire_components(app, store, settings)
    logger.info("Store opened")

    if settings.seed_on_startup:
        seeded = seed_if_empty(store, app.state.password_hasher, settings.admin_password)
        logger.info(
            "Seed check complete (admin_created=%s, products_created=%d)",
            seeded.admin_created,
            seeded.products_created,
        )

    yield

    store.close()
    logger.info("Stockroom API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Stockroom API",
    description="Token-authenticated users and products service.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler. Wall-clock time is captured before and after call_next so latency
# is reported on every response. The Authorization header is never logged.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(users_router, prefix="/api", tags=["Auth"])
app.include_router(products_router, prefix="/api", tags=["Products"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same {"error": message} envelope so the client can
# parse failures uniformly.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, message: str, detail=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, detail=detail).model_dump(exclude_none=True),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render taxonomy errors raised by the gate, services, or store.

    Server-side failures are logged with their cause chain; the client sees
    only the operation-level message, never raw store detail.
    """
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when a request body, path or query parameter fails validation."""
    detail = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
    return _error_response(400, "Invalid request", detail)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Flatten Starlette/FastAPI HTTP exceptions (404 route, 405 method) into the envelope."""
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. Public: load balancers call it.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return liveness, version, and whether the store answers a query."""
    database = "ok"
    try:
        await run_in_threadpool(request.app.state.store.count_users)
    except StorageError:
        database = "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
