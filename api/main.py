"""
api/main.py -- FastAPI application entry point for Chirpy.

Run with:  uvicorn asgi:app --reload
           python main.py --port 8080

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan builds the stores and the SessionService on startup and disposes the
engines on shutdown. The signing secret travels inside SessionConfig; no
module reads it from a global.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.admin import router as admin_router
from api.routes.auth import router as auth_router
from api.routes.chirps import router as chirps_router
from api.routes.users import router as users_router
from api.routes.webhooks import router as webhooks_router
from auth.errors import AuthError
from auth.session import SessionConfig, SessionService
from auth.store import UserStore
from chirps.store import ChirpStore
from core.config import get_settings

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("chirpy.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the stores and session service; dispose them on shutdown.

    Everything before yield runs on startup; everything after yield runs on
    shutdown, even if a request handler raised.
    """
    settings = get_settings()
    logger.info("Chirpy API starting up (platform=%s)", settings.platform or "unset")
    app.state.settings = settings
    app.state.fileserver_hits = 0
    app.state.user_store = UserStore(settings.database_url)
    app.state.chirp_store = ChirpStore(settings.database_url)
    app.state.sessions = SessionService(SessionConfig.from_settings(settings), app.state.user_store)
    logger.info("Stores and session service initialized")

    yield

    app.state.chirp_store.close()
    app.state.user_store.close()
    logger.info("Chirpy API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Chirpy API",
    description="Users, sessions and chirps.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# TrustedHost -> SlowAPI.
# ---------------------------------------------------------------------------

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)
app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Static file hit counter
#
# Counts every request under /app/ before StaticFiles serves it. The counter
# is read by GET /admin/metrics and zeroed by POST /admin/reset. Middleware
# runs on the event loop, so the increment needs no lock.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def count_fileserver_hits(request: Request, call_next):
    path = request.url.path
    if path == "/app" or path.startswith("/app/"):
        request.app.state.fileserver_hits = getattr(request.app.state, "fileserver_hits", 0) + 1
    return await call_next(request)


# ---------------------------------------------------------------------------
# Request logging middleware
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

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users"])
app.include_router(chirps_router, prefix="/api", tags=["Chirps"])
app.include_router(webhooks_router, prefix="/api", tags=["Webhooks"])
app.include_router(admin_router, prefix="/admin", tags=["Admin"])

app.mount("/app", StaticFiles(directory=_settings.static_dir, html=True, check_dir=False), name="app")


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Decode an AuthError into its HTTP status and public message.

    The specific kind (revoked vs expired vs forged ...) is logged but never
    returned. Server faults are logged with their traceback.
    """
    kind = exc.kind
    if kind.is_server_fault:
        logger.error("%s on %s %s: %s", kind.name, request.method, request.url.path, exc.message, exc_info=exc)
    else:
        logger.info("%s on %s %s", kind.name, request.method, request.url.path)
    response = JSONResponse(
        status_code=kind.http_status,
        content=ErrorResponse(error=ErrorDetail(code=kind.public_code, message=exc.public_message)).model_dump(),
    )
    if kind.http_status == 401:
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the request body, path or query params cannot be decoded."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    When detail is already a structured dict, use it directly as the error
    field rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable.
# No rate limit -- load balancer probes must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/healthz", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=VERSION)
