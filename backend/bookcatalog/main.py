"""
Book Catalog — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error
       handling and resource lifecycle.
How:   create_app() registers middleware, exception handlers and routers;
       the lifespan loads settings, connects to MongoDB and builds the
       BookService that request handlers receive through dependencies.
Who:   uvicorn (uvicorn bookcatalog.main:app) and the test suite.

Lifecycle:
    Startup:
    1. Load settings (MissingEnvVariableError aborts startup)
    2. Configure logging
    3. Create the MongoDB client and probe it with `ping`
    4. Build MongoBookRepository → BookService, store on app.state

    Shutdown:
    1. Close the MongoDB client

Error → HTTP status:
    NotFoundError                                 → 404
    ValidationError, ExistingRecordError,
    AlreadyCheckedOutError, AlreadyCheckedInError → 400
    any other BookCatalogError                    → 500
    unexpected exception                          → 500 (generic message)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bookcatalog import __version__
from bookcatalog.config import load_settings
from bookcatalog.database import create_client, dispose_client, get_collection, ping
from bookcatalog.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    BookCatalogError,
    ExistingRecordError,
    MissingEnvVariableError,
    NotFoundError,
    ValidationError,
)
from bookcatalog.middleware.logging import RequestLoggingMiddleware
from bookcatalog.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    current_request_id,
)
from bookcatalog.repositories.book_repository import MongoBookRepository
from bookcatalog.routes import books, health
from bookcatalog.services.book_service import BookService

logger = logging.getLogger(__name__)

CLIENT_ERRORS = (
    ValidationError,
    ExistingRecordError,
    AlreadyCheckedOutError,
    AlreadyCheckedInError,
)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Why: both log every operation at INFO/DEBUG, which drowns application logs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect to the document store on startup; disconnect on shutdown."""
    try:
        settings = load_settings()
    except MissingEnvVariableError as e:
        setup_logging()
        logger.error("Configuration error: %s", e.message)
        raise

    setup_logging(settings.log_level)
    logger.info("Book Catalog %s starting up...", __version__)

    client = create_client(settings)
    # Why not fatal: the driver reconnects on its own; /health reports the state
    if await ping(client):
        logger.info("Connected to MongoDB database '%s'", settings.database_name)
    else:
        logger.warning("MongoDB is not reachable yet; requests will fail until it is")

    repository = MongoBookRepository(get_collection(client, settings))
    app.state.mongo_client = client
    app.state.book_service = BookService(repository)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Book Catalog shutting down...")
    await dispose_client(client)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(exc: BookCatalogError, rid: str, include_details: bool = False) -> dict:
    body = {
        "error": exc.kind.value,
        "message": exc.message,
        "request_id": rid,
    }
    if include_details:
        body["details"] = exc.context
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handlers are looked up along the exception's MRO, so the specific
    handlers below take precedence over the BookCatalogError catch-all.
    Stack traces are logged, never returned.
    """

    async def handle_client_error(request: Request, exc: BookCatalogError):
        rid = current_request_id(request)
        logger.info("[%s] %s: %s", rid, exc.kind.value, exc.message)
        return JSONResponse(status_code=400, content=error_body(exc, rid, include_details=True))

    for exc_class in CLIENT_ERRORS:
        app.add_exception_handler(exc_class, handle_client_error)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = current_request_id(request)
        return JSONResponse(status_code=404, content=error_body(exc, rid))

    @app.exception_handler(BookCatalogError)
    async def handle_server_error(request: Request, exc: BookCatalogError):
        """Storage, persist and update failures."""
        rid = current_request_id(request)
        logger.error("[%s] %s: %s | Context: %s", rid, exc.kind.value, exc.message, exc.context)
        return JSONResponse(status_code=500, content=error_body(exc, rid))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Last-resort handler for anything the handlers above do not cover.

        Runs in ServerErrorMiddleware, outside RequestIDMiddleware, so the
        request id comes from request.state and the header is set here.
        """
        rid = current_request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    No settings are read here; everything environment-dependent happens in
    the lifespan, so importing this module has no side effects.
    """
    app = FastAPI(
        title="Book Catalog API",
        description=(
            "Library catalog of books with checkout/check-in state and ratings, "
            "backed by MongoDB."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Last added executes first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(books.router)
    app.include_router(health.router)

    return app


app = create_app()
