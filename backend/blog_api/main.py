"""
Blog API — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance, and the
       `blog-api` console entry point.
How:   create_app() returns a configured FastAPI instance; the lifespan
       connects to the store before the first request is accepted.
Who:   uvicorn (blog_api.main:app), platform ASGI servers, run().

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌───────────────────────────────┐ │
    │  │ GET / /health│ │ /blogs  /blog/id  /blog/author│ │
    │  └──────────────┘ └───────────────────────────────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Store→500    │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Disconnected → Connecting → Connected → Listening
                        └──→ Failed: StartupFailure aborts the lifespan,
                             the ASGI server exits non-zero.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_api import __version__
from blog_api.config import Settings, settings as default_settings
from blog_api.database import Database
from blog_api.exceptions import (
    NotFoundError,
    StartupFailure,
    StoreError,
    ValidationError,
)
from blog_api.middleware.logging import RequestLoggingMiddleware
from blog_api.middleware.request_id import RequestIDMiddleware, request_id_var
from blog_api.routes import blogs, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called by the lifespan and by run(); force=True makes repeat calls
    replace the previous handlers instead of stacking them.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's; SQL echo only at DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if log_level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Startup Sequence
# ══════════════════════════════════════════════════════════════════════════

async def open_database(settings: Settings) -> Database:
    """
    Connect to the store and, if configured, create missing tables.

    Raises:
        StartupFailure: connection or schema creation failed.
    """
    database = Database.from_settings(settings)
    logger.info("Connecting to database...")
    await database.connect()

    if settings.auto_create_schema:
        try:
            await database.create_schema()
        except SQLAlchemyError as e:
            await database.dispose()
            raise StartupFailure(
                message=f"Could not create database schema: {e}",
                context={"error_type": type(e).__name__},
            ) from e
    return database


def _log_ready(settings: Settings) -> None:
    if settings.port is None:
        logger.info("Server is ready (listener managed by the hosting ASGI server)")
    elif settings.is_production:
        logger.info("Server is running in production on port %d", settings.port)
    else:
        logger.info("Server is running on http://localhost:%d", settings.port)
    logger.info("Environment: %s", settings.environment)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging → store connection → app.state.database.
    Shutdown: dispose the engine.

    A StartupFailure propagates out of the lifespan, so uvicorn reports
    "Application startup failed" and exits with a non-zero status instead
    of serving requests against a broken store.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("Blog API %s starting up...", __version__)

    try:
        database = await open_database(settings)
    except StartupFailure as e:
        logger.critical("Startup aborted: %s", e.message)
        raise

    app.state.database = database
    _log_ready(settings)

    yield

    logger.info("Blog API shutting down...")
    await database.dispose()
    app.state.database = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _format_validation_errors(exc: RequestValidationError) -> list:
    details = []
    for error in exc.errors():
        # loc starts with "body"/"query"/"path"; the rest is the field path
        loc = [str(part) for part in error.get("loc", ())[1:]]
        details.append({"field": ".".join(loc) or "body", "message": error.get("msg", "")})
    return details


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and error envelopes.

    Handler hierarchy:
        RequestValidationError  → 400 (malformed or invalid request body)
        ValidationError         → 400 (includes InvalidIdentifierError)
        NotFoundError           → 404
        StoreError              → 500 (generic message, details logged)
        HTTPException           → its own status; 404 becomes "Route not found"
        Exception (fallback)    → 500 "Something went wrong!"
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        details = _format_validation_errors(exc)
        message = "Validation failed: " + "; ".join(
            f"{d['field']}: {d['message']}" for d in details
        )
        logger.warning("[%s] %s", rid, message)
        return JSONResponse(
            status_code=400,
            content={"error": message, "details": details, "request_id": rid},
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = _request_id(request)
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={"error": exc.message, "details": exc.context, "request_id": rid},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content={"error": exc.message, "request_id": _request_id(request)},
        )

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        rid = _request_id(request)
        logger.error("[%s] Store error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "request_id": rid},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": error, "request_id": _request_id(request)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log only, never into the response."""
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Something went wrong!", "request_id": rid},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Overrides the environment-derived settings (tests).
    """
    app = FastAPI(
        title="Blog API",
        description="CRUD API for blog posts.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or default_settings
    app.state.database = None

    # Last added runs first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(blogs.router)

    return app


# uvicorn expects `blog_api.main:app` to be importable
app = create_app()


# ══════════════════════════════════════════════════════════════════════════
# Console Entry Point
# ══════════════════════════════════════════════════════════════════════════

async def _check_store(settings: Settings) -> None:
    database = await open_database(settings)
    await database.dispose()


def run(settings: Optional[Settings] = None) -> None:
    """
    `blog-api` command: verify the store, then serve on PORT.

    Exits with status 1 when the store is unreachable. Without PORT nothing
    is bound: the check runs and the command returns, leaving
    blog_api.main:app for a platform-provided server.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level)

    try:
        asyncio.run(_check_store(settings))
    except StartupFailure as e:
        logger.critical("Startup aborted: %s", e.message)
        sys.exit(1)

    if settings.port is None:
        logger.info(
            "PORT is not set; not binding a listener. "
            "Serve blog_api.main:app with the platform's ASGI server."
        )
        return

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
