"""
Tree Leaves Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       that owns exactly one LeafStore and one LeafService.
Who:   Called by uvicorn (uvicorn app.main:app) or by run() below.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌────────┐ ┌─────────┐ ┌────────────┐ ┌─────────┐  │
    │  │ Req ID │→│ Logging │→│ Body Limit │→│GZip/CORS│  │
    │  └────────┘ └─────────┘ └────────────┘ └─────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /api/leaves  │ │ /api/health  │ │ / pages     │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  app.state: settings, leaf_store, leaf_service      │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log storage mode and listen address
    Shutdown: log shutdown (stores hold no open handles)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings, settings as default_settings
from app.exceptions import (
    LeafTreeError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from app.middleware.body_limit import BodySizeLimitMiddleware
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import health, leaves, pages
from app.schemas.leaf import LeafClearResponse
from app.services.leaf_service import LeafService
from app.services.leaf_store import LeafStore, create_leaf_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Settings) -> None:
    """
    Configure logging for the entire application.

    Level comes from LOG_LEVEL, or from the environment when unset
    (DEBUG in development, INFO elsewhere).

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, config.effective_log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings
    store: LeafStore = app.state.leaf_store

    setup_logging(config)
    logger.info("=" * 60)
    logger.info("Tree Leaves Backend starting up...")
    logger.info("Environment: %s", config.environment)
    if store.platform == "memory":
        logger.warning("Ephemeral storage active: leaves are lost when the process exits")
    else:
        logger.info("Leaves file: %s", config.leaves_file_path.resolve())
    logger.info("Server ready at http://%s:%d", config.host, config.port)
    logger.info("=" * 60)

    yield

    logger.info("Tree Leaves Backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _envelope(error: str, message: str, details: Optional[dict] = None) -> dict:
    content = {
        "success": False,
        "error": error,
        "message": message,
        "requestId": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return content


def register_exception_handlers(app: FastAPI, config: Settings) -> None:
    """
    Map exception types to status codes and {"success": false} envelopes.

    Handler hierarchy:
        ValidationError, RequestValidationError → 400
        NotFoundError, unknown routes/methods   → 404
        StorageError                            → 500
        LeafTreeError (base)                    → 500
        Exception (fallback)                    → 500
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_envelope("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=_envelope("validation_error", "Invalid request body", {"errors": errors}),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_envelope("not_found", exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # The static mount at "/" answers every unmatched path, and rejects
        # non-GET methods with 405; both mean no route handles the request.
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content=_envelope(
                    "Route not found",
                    "The requested resource was not found on this server.",
                ),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope("http_error", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_envelope("storage_error", exc.message),
        )

    @app.exception_handler(LeafTreeError)
    async def handle_app_error(request: Request, exc: LeafTreeError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_envelope("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for unexpected errors.

        The stack trace is logged server-side; outside production the
        exception text is also returned under details.exception.
        """
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        details = None if config.is_production else {"exception": f"{type(exc).__name__}: {exc}"}
        return JSONResponse(
            status_code=500,
            content=_envelope(
                "internal_server_error",
                "An unexpected error occurred",
                details,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    store: Optional[LeafStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use; defaults to the module-level settings.
        store:  Store to use; defaults to create_leaf_store(config).

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    config = config or default_settings
    store = store or create_leaf_store(config)

    app = FastAPI(
        title="Tree Leaves API",
        description="Grow, list and reset the leaves of an interactive tree.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.leaf_store = store
    app.state.leaf_service = LeafService(store)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → BodyLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=config.max_body_size)
    app.add_middleware(RequestLoggingMiddleware, combined=config.is_production)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, config)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(leaves.router)
    if config.allow_clear_via_get:
        app.add_api_route(
            "/api/leaves/clear",
            leaves.clear_leaves_via_get,
            methods=["GET"],
            response_model=LeafClearResponse,
            response_model_exclude_none=True,
            tags=["Leaves"],
            summary="Clear all leaves (GET, compatibility)",
        )
    app.include_router(health.router)
    app.include_router(pages.router)

    # Front-end assets (scripts, styles, images); must stay the last route
    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir), name="static")
    else:
        logger.warning("Static directory %s not found; front-end assets are not served", static_dir)

    return app


def run() -> None:
    """Start the server with uvicorn using HOST and PORT from settings."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.effective_log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `app.main:app` to be importable
app = create_app()


if __name__ == "__main__":
    run()
