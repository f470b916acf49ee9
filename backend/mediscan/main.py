"""
MediScan API: FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers, and
       takes optional collaborator instances. Whatever is not passed in is
       built from settings in the lifespan.
Who:   Called by uvicorn (``uvicorn mediscan.main:app``) and by the tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌──────┐ ┌──────────┐ ┌─────────┐ ┌───────────┐        │
    │  │ CORS │→│  Req ID  │→│ Logging │→│ Auth Gate │        │
    │  └──────┘ └──────────┘ └─────────┘ └───────────┘        │
    │                                                         │
    │  Routes: analytics, health-query, billing, reports,     │
    │          diagnostics, leaderboard, health               │
    │                                                         │
    │  app.state: document_store, health_assistant,           │
    │             identity_provider                           │
    └─────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mediscan import __version__
from mediscan.config import settings
from mediscan.exceptions import InternalServiceError, MediScanError
from mediscan.middleware.auth_gate import AuthGateMiddleware
from mediscan.middleware.logging import RequestLoggingMiddleware
from mediscan.middleware.request_id import (
    UNEXPECTED_ERROR_MESSAGE,
    RequestIDMiddleware,
    error_body,
    request_id_var,
)
from mediscan.routes import analytics, billing, diagnostics, health, health_query, leaderboard, reports
from mediscan.services.document_store import DocumentStore, MongoDocumentStore
from mediscan.services.gemini_service import GeminiHealthAssistant
from mediscan.services.identity import IdentityProvider, SessionTokenIdentityProvider
from mediscan.services.llm_base import HealthAssistant

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Collaborator Construction
# ══════════════════════════════════════════════════════════════════════════

def build_document_store() -> DocumentStore:
    return MongoDocumentStore(
        uri=settings.mongodb_uri,
        database=settings.mongodb_database,
        timeout_ms=settings.mongodb_timeout_ms,
    )


def build_health_assistant() -> HealthAssistant:
    return GeminiHealthAssistant(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_model,
        temperature=settings.gemini_temperature,
        max_output_tokens=settings.gemini_max_output_tokens,
    )


def build_identity_provider() -> IdentityProvider:
    return SessionTokenIdentityProvider(
        key=settings.auth_jwt_key,
        algorithms=settings.auth_jwt_algorithm_list,
        issuer=settings.auth_jwt_issuer,
        audience=settings.auth_jwt_audience,
        cookie_name=settings.auth_session_cookie,
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Report missing configuration (the server still starts)
        3. Build any collaborator not injected through create_app()

    Shutdown:
        1. Close the document store client
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("MediScan API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    if getattr(app.state, "document_store", None) is None:
        app.state.document_store = build_document_store()
    if getattr(app.state, "health_assistant", None) is None:
        app.state.health_assistant = build_health_assistant()
    if getattr(app.state, "identity_provider", None) is None:
        app.state.identity_provider = build_identity_provider()

    logger.info("MongoDB URI: %s", "configured" if settings.mongodb_configured else "not configured")
    logger.info("Unclassified routes: %s", "denied" if settings.deny_unclassified_routes else "allowed")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("MediScan API shutting down...")
    await app.state.document_store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP status codes and the error envelope.

    Handler hierarchy:
        UnauthorizedError        → 401
        ValidationError          → 400
        RequestValidationError   → 400 (malformed body or query string)
        InternalServiceError     → 500, with the underlying message in details
        MediScanError (base)     → its status_code
        Exception (fallback)     → 500, generic message

    Unexpected exceptions are normally rendered by RequestIDMiddleware;
    the Exception handler only sees errors raised outside the middleware chain.
    """

    @app.exception_handler(InternalServiceError)
    async def handle_internal_service_error(request: Request, exc: InternalServiceError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, exc.message, exc.details, exc.context)
        return JSONResponse(status_code=500, content=error_body(exc.message, exc.details))

    @app.exception_handler(MediScanError)
    async def handle_mediscan_error(request: Request, exc: MediScanError):
        rid = request_id_var.get("")
        logger.warning("[%s] %s (%d)", rid, exc.message, exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else first.get("msg")
        logger.warning("[%s] Request validation error: %s", rid, detail)
        return JSONResponse(status_code=400, content=error_body("Invalid request", detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(UNEXPECTED_ERROR_MESSAGE),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    document_store: Optional[DocumentStore] = None,
    health_assistant: Optional[HealthAssistant] = None,
    identity_provider: Optional[IdentityProvider] = None,
    deny_unclassified: Optional[bool] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        document_store:     Injected document store (tests pass fakes).
        health_assistant:   Injected AI health assistant.
        identity_provider:  Injected identity resolver.
        deny_unclassified:  Override ``settings.deny_unclassified_routes``.
    """
    app = FastAPI(
        title="MediScan API",
        description=(
            "Medical-imaging reports, analytics and AI health queries for "
            "signed-in patients."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.document_store = document_store
    app.state.health_assistant = health_assistant
    app.state.identity_provider = identity_provider

    # Last added = first to execute:
    # CORS → RequestID → Logging → AuthGate → routes
    app.add_middleware(AuthGateMiddleware, deny_unclassified=deny_unclassified)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_exception_handlers(app)

    app.include_router(analytics.router)
    app.include_router(health_query.router)
    app.include_router(billing.router)
    app.include_router(reports.router)
    app.include_router(diagnostics.router)
    app.include_router(leaderboard.router)
    app.include_router(health.router)

    return app


app = create_app()
