"""FastAPI server for TeamSpace."""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from teamspace import __version__
from teamspace.api.rate_limit import limiter
from teamspace.api.teams import teams_router
from teamspace.db import close_db, init_db
from teamspace.errors import (
    ConcurrencyConflictError,
    InvalidStateError,
    NotFoundError,
    TeamSpaceError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

# --- Logging configuration ---
_log_level = os.environ.get("TEAMSPACE_LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# --- CORS configuration ---
_DEFAULT_CORS_ORIGINS = "http://localhost:4200,http://localhost:4280"


def _get_cors_origins() -> list[str]:
    """Parse CORS origins from TEAMSPACE_CORS_ORIGINS env var.

    Rejects wildcard '*' when credentials are enabled.
    """
    raw = os.environ.get("TEAMSPACE_CORS_ORIGINS", _DEFAULT_CORS_ORIGINS)
    if raw.strip() == "*":
        logger.warning(
            "TEAMSPACE_CORS_ORIGINS='*' is insecure with credentials. "
            "Using default dev origins instead."
        )
        raw = _DEFAULT_CORS_ORIGINS
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if os.environ.get("TEAMSPACE_ENV") == "production":
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"
        return response


# --- Request logging middleware ---
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all API requests."""

    async def dispatch(self, request: Request, call_next):
        start = datetime.now()
        response = await call_next(request)
        duration = (datetime.now() - start).total_seconds() * 1000
        if request.url.path.startswith("/api/"):
            logger.info(
                "%s %s %d %.0fms",
                request.method,
                request.url.path,
                response.status_code,
                duration,
            )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting TeamSpace server")
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down TeamSpace server")
    await close_db()


app = FastAPI(
    title="TeamSpace API",
    description="Teams, invite tokens and membership approval",
    version=__version__,
    lifespan=lifespan,
)

# Attach limiter to app state (required by slowapi)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Security headers
app.add_middleware(SecurityHeadersMiddleware)

# Request logging
app.add_middleware(RequestLoggingMiddleware)

# CORS configuration for web UI
cors_origins = _get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Domain error mapping ---
_ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    InvalidStateError: status.HTTP_400_BAD_REQUEST,
    ConcurrencyConflictError: status.HTTP_409_CONFLICT,
}


def error_status(exc: TeamSpaceError) -> int:
    """HTTP status for a domain error, by class."""
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(TeamSpaceError)
async def teamspace_error_handler(request: Request, exc: TeamSpaceError) -> JSONResponse:
    status_code = error_status(exc)
    logger.info(
        "%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.kind
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error handling %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "kind": "unexpected"},
    )


# --- Health / Readiness endpoints ---
@app.get("/health")
async def health_check():
    """Health check endpoint for orchestration."""
    return {"status": "healthy"}


@app.get("/ready")
async def readiness_check():
    """Readiness check - verifies database is accessible."""
    from sqlalchemy import text

    from teamspace.db.database import get_engine

    engine = get_engine()
    if engine is None:
        return JSONResponse(
            status_code=503, content={"status": "not ready", "reason": "database not initialized"}
        )
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ready"}
    except Exception as e:
        logger.error("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503, content={"status": "not ready", "reason": "database error"}
        )


# Include API routes with /api prefix
app.include_router(teams_router, prefix="/api")
