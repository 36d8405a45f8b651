"""
FolderNotes Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn foldernotes.main:app`), the `foldernotes` console
       script, and the test suite (with its own Settings).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────┐ ┌────────────┐ ┌───────┐ │
    │  │  Req ID  │→│ Logging │→│ Body limit │→│ CORS  │ │
    │  └──────────┘ └─────────┘ └────────────┘ └───────┘ │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌─────────────┐ ┌──────────────┐ │
    │  │ /api/folders │ │ /api/notes  │ │ GET /health  │ │
    │  └──────────────┘ └─────────────┘ └──────────────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ NotFound→404 │ Store→500 │ Validation→500    │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build the store handle and attach it to app.state (an unusable
       DATABASE_URL is logged and leaves app.state.database as None)
    3. Ping the store, ensure the schema, run the default-folder bootstrap
       (failures are logged; the server still starts)

    Shutdown:
    1. Dispose the store handle (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from foldernotes import __version__
from foldernotes.config import Settings, settings
from foldernotes.database import Database
from foldernotes.exceptions import (
    FolderNotesError,
    NotFoundError,
    StoreUnavailableError,
)
from foldernotes.middleware.body_limit import BodySizeLimitMiddleware
from foldernotes.middleware.logging import RequestLoggingMiddleware
from foldernotes.middleware.request_id import RequestIDMiddleware, request_id_var
from foldernotes.routes import folders, health, notes
from foldernotes.services.bootstrap import ensure_default_folder

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Called once during app startup, before the store is touched.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Replaced by RequestLoggingMiddleware / too chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

async def initialize_store(database: Database, app_settings: Settings) -> None:
    """
    Verify connectivity, ensure tables, and make sure one folder exists.

    Runs once per process. A failing store is logged and left alone: the
    listener starts anyway and API calls answer 500 until the store is back.
    """
    if not await database.ping():
        logger.error(
            "Database connection failed (%s); API requests will fail until it is reachable",
            database.engine.url.render_as_string(hide_password=True),
        )
        return
    logger.info("Database connection established")

    try:
        if app_settings.db_create_tables:
            await database.create_schema()
        async with database.session() as session:
            await ensure_default_folder(session, app_settings.default_folder_name)
    except (SQLAlchemyError, OSError, StoreUnavailableError) as e:
        logger.error("Store initialization failed: %s", str(e))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("FolderNotes Backend %s starting up...", __version__)

    app.state.database = None
    app.state.store_error = None
    try:
        database = Database.from_settings(app_settings)
    except (SQLAlchemyError, ImportError, ValueError) as e:
        # Bad URL or missing driver: keep serving, API calls answer 500
        database = None
        app.state.store_error = f"Database is not configured: {e}"
        logger.error("Could not create the database engine from DATABASE_URL: %s", str(e))
    else:
        app.state.database = database
        await initialize_store(database, app_settings)

    logger.info("Server ready on port %d", app_settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("FolderNotes Backend shutting down...")
    if database is not None:
        await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request body"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"error": <message>}` responses.

    Handler hierarchy:
        NotFoundError           → 404
        StoreUnavailableError   → 500 (raw store message)
        RequestValidationError  → 500 (bad or missing body fields)
        HTTPException           → its own status (unknown route, bad method)
        FolderNotesError (base) → 500
        Exception (fallback)    → 500, traceback logged
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] Not found: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_error(request: Request, exc: StoreUnavailableError):
        rid = request_id_var.get("")
        logger.error("[%s] Store error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        message = _validation_message(exc)
        logger.warning("[%s] Invalid request to %s: %s", rid, request.url.path, message)
        return JSONResponse(status_code=500, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(FolderNotesError)
    async def handle_app_error(request: Request, exc: FolderNotesError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(exc)})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use instead of the environment-derived
                      singleton (tests pass a temporary SQLite URL).
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="FolderNotes API",
        description="Notes organised in folders, with base64 file attachments.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → BodyLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=app_settings.max_body_size)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(folders.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run(
        "foldernotes.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `foldernotes.main:app` to be importable
app = create_app()
