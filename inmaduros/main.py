"""
Los Inmaduros Backend — FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn inmaduros.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: Request ID → Rate Limit → Logging → GZip    │
    │              → CORS                                      │
    │                                                          │
    │  Routers:  /api/routes        /api/route-calls           │
    │            /api/attendances   /api/reviews               │
    │            /api/favorites     /api/photos                │
    │            /api/auth          /api/config                │
    │            /api/files         /health                    │
    │                                                          │
    │  Exception Handlers:                                     │
    │   InmadurosError → its status_code                       │
    │   request validation → 400 "Validation failed" + details │
    │   IntegrityError → 409   unknown path → 404              │
    │   anything else → 500                                    │
    └──────────────────────────────────────────────────────────┘

Error Envelope:
    {"success": false, "error": "...", "details"?: ..., "request_id": "a1b2c3d4"}
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from inmaduros import __version__
from inmaduros.config import settings
from inmaduros.database import dispose_engine
from inmaduros.exceptions import InmadurosError, RateLimitExceededError
from inmaduros.middleware.logging import RequestLoggingMiddleware
from inmaduros.middleware.rate_limit import RateLimitMiddleware
from inmaduros.middleware.request_id import RequestIDMiddleware, request_id_var
from inmaduros.routes import (
    attendances,
    auth,
    config,
    favorites,
    files,
    health,
    photos,
    reviews,
    route_calls,
    route_catalog,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging once for the whole application.

    Format: 2026-10-17T19:30:00 [INFO] inmaduros.services.photo_service: ...
    Output goes to stdout, which the container runtime collects.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check (logged, not fatal, so /health
              still answers), banner.
    Shutdown: dispose the database engine.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Los Inmaduros Backend %s starting (%s)", __version__, settings.environment)

    if settings.is_production:
        try:
            settings.validate_required_for_production()
        except ValueError as e:
            logger.error("Configuration error: %s", str(e))
            logger.error("Fix the configuration and restart the server.")

    logger.info("Storage backend: %s", settings.storage_backend)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Los Inmaduros Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _field_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic errors into [{field, message}].

    ("body", "meetingPoints", 0, "location") → "meetingPoints.0.location"
    """
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        message = err.get("msg", "Invalid value")
        # ValueErrors raised in validators come prefixed by pydantic
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(loc) or "body", "message": message})
    return details


def _error_body(error: str, details: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": error}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the error envelope.

    Security: 5xx responses never carry internal details (stack traces,
    SQL, file paths). Those are logged server-side with the request ID.
    """

    @app.exception_handler(InmadurosError)
    async def handle_app_error(request: Request, exc: InmadurosError):
        rid = request_id_var.get("")
        headers = {}
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            body = _error_body(exc.message)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
            # Client errors: context is safe and helps the caller
            body = _error_body(exc.message, exc.context)
        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)
            body["details"] = {"retry_after": exc.retry_after}
        return JSONResponse(status_code=exc.status_code, content=body, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = _field_errors(exc.errors())
        logger.info("[%s] Validation failed: %s", request_id_var.get(""), details)
        return JSONResponse(status_code=400, content=_error_body("Validation failed", details))

    @app.exception_handler(PydanticValidationError)
    async def handle_model_validation(request: Request, exc: PydanticValidationError):
        # Raised by handlers that validate form fields themselves (photo upload)
        details = _field_errors(exc.errors())
        logger.info("[%s] Validation failed: %s", request_id_var.get(""), details)
        return JSONResponse(status_code=400, content=_error_body("Validation failed", details))

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        logger.warning("[%s] Integrity error: %s", request_id_var.get(""), str(exc.orig))
        return JSONResponse(status_code=409, content=_error_body("Resource already exists"))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            body = _error_body("Route not found")
            body["path"] = request.url.path
            return JSONResponse(status_code=404, content=body)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, full stack trace in the logs only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Assemble middleware, exception handlers and routers.

    A factory (rather than a module-level app only) lets the test suite
    build fresh instances with clean rate limit state.
    """
    app = FastAPI(
        title="Los Inmaduros API",
        description=(
            "Backend of the Los Inmaduros skating club: route catalog, route calls, "
            "attendance, reviews, favorites and a post-moderated photo gallery."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition:
    # RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(route_catalog.router)
    app.include_router(route_calls.router)
    app.include_router(attendances.router)
    app.include_router(reviews.router)
    app.include_router(favorites.router)
    app.include_router(photos.router)
    app.include_router(config.router)
    app.include_router(auth.router)
    app.include_router(files.router)
    if not settings.is_production:
        app.include_router(auth.test_token_router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
