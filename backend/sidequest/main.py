"""
Side Quest Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn sidequest.main:app) or the `sidequest` script.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  GET /health  POST /polish  GET|POST /cards         │
    │  DELETE /cards/{id}  DELETE /cards/cleanup/expired  │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Dependency→500     │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Log configuration gaps (missing GROQ_API_KEY degrades /polish only)
    3. Build the shared httpx client, Groq SDK client, database engine, and
       gateways on app.state

    Shutdown:
    1. Close the httpx and Groq clients
    2. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sidequest import __version__
from sidequest.config import settings
from sidequest.database import create_engine, create_session_factory
from sidequest.exceptions import DependencyError, NotFoundError, ValidationError
from sidequest.middleware.logging import RequestLoggingMiddleware
from sidequest.middleware.request_id import RequestIDMiddleware, request_id_var
from sidequest.routes import cards, health, polish
from sidequest.services.groq_service import GroqService, create_groq_client
from sidequest.services.storage_gateway import StorageGateway

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by Docker / the platform log collector)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own every process-lifetime resource.

    Everything a request needs from outside is created here and placed on
    app.state; dependencies.py reads it back. Nothing is created at import.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("Side Quest backend starting up (version %s)...", __version__)

    for problem in settings.missing_optional_settings():
        logger.warning("Configuration: %s", problem)

    http_client = httpx.AsyncClient()
    engine = create_engine(settings)

    app.state.http_client = http_client
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.storage = StorageGateway(
        client=http_client,
        base_url=settings.supabase_url,
        api_key=settings.supabase_anon_key,
        bucket=settings.storage_bucket,
    )
    llm_client = create_groq_client(settings.groq_api_key, settings.groq_base_url)
    app.state.polisher = GroqService(client=llm_client, model=settings.groq_model)

    logger.info("Side Quest backend running on port %d", settings.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Side Quest backend shutting down...")
    await http_client.aclose()
    if llm_client is not None:
        await llm_client.close()
    await engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the `{"error": message}` body.

    Handler hierarchy:
        ValidationError         → 400 (client can fix the input)
        RequestValidationError  → 400 (malformed body or form)
        NotFoundError           → 404
        DependencyError         → 500 (message returned, context logged)
        Exception (fallback)    → 500 generic message, stack trace logged.
                                  Route errors reach RequestIDMiddleware
                                  first; this only sees middleware failures.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request: %s", rid, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(DependencyError)
    async def handle_dependency_error(request: Request, exc: DependencyError):
        rid = request_id_var.get("")
        cause = exc.__cause__
        logger.error(
            "[%s] %s: %s | Context: %s | Cause: %r",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
            cause,
        )
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance. Gateways are attached by the
             lifespan, so tests that skip the lifespan override the
             dependencies in sidequest.dependencies instead.
    """
    app = FastAPI(
        title="Side Quest API",
        description=(
            "Submit, list and delete time-limited promotional cards with images, "
            "and polish card descriptions with AI."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(polish.router)
    app.include_router(cards.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app on HOST:PORT."""
    uvicorn.run("sidequest.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
