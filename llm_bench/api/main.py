"""FastAPI application for the LLM benchmark dashboard.

This module wires the benchmark store, the engine client, the submission
orchestrator and the history source together and exposes them as REST
endpoints for the dashboard frontend.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Tuple

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.history import EngineHistory, StoreHistory
from ..core.orchestrator import BenchmarkOrchestrator
from ..core.schema import issues_from_errors
from ..engine.client import EngineClient
from ..settings import BenchSettings
from ..storage import build_store
from ..storage.base import BenchmarkStore
from ..utils.errors import (
    BenchmarkNotFoundError,
    ConfigInvalidError,
    EngineRejectedError,
    EngineResponseInvalidError,
    EngineTimeoutError,
    EngineUnreachableError,
    HistoryReadOnlyError,
    LLMBenchError,
    SchemaValidationError,
)
from .endpoints import benchmarks, health, models

logger = logging.getLogger(__name__)

# Checked in order; first match wins
ERROR_STATUS_CODES = [
    (BenchmarkNotFoundError, 404),
    (HistoryReadOnlyError, 405),
    (EngineUnreachableError, 503),
    (EngineTimeoutError, 504),
    (EngineResponseInvalidError, 502),
    (SchemaValidationError, 400),
]


def status_for_error(exc: LLMBenchError) -> int:
    """HTTP status code for a benchmark error."""
    if isinstance(exc, EngineRejectedError):
        # engine 4xx are the caller's problem, engine 5xx are ours
        return exc.status_code if 400 <= exc.status_code < 500 else 502
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


SUBMIT_PATHS = ("/api/benchmarks", "/api/benchmarks/")


def request_validation_error(request: Request, exc: RequestValidationError) -> Tuple[int, SchemaValidationError]:
    """Structured error and status for a request FastAPI could not parse.

    A malformed submit body is a configuration error like any other; other
    request shapes keep FastAPI's 422.
    """
    issues = issues_from_errors(exc.errors(), skip_prefix="body")
    if request.method == "POST" and request.url.path in SUBMIT_PATHS:
        return 400, ConfigInvalidError(issues)
    return 422, SchemaValidationError(issues, prefix="Invalid request")


def create_app(
    settings: Optional[BenchSettings] = None,
    store: Optional[BenchmarkStore] = None,
    engine: Optional[EngineClient] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Runtime configuration; read from the environment when omitted
        store: Pre-built store to use instead of the configured backend
        engine: Pre-built engine client to use instead of one for ``settings.engine_url``
    """
    settings = settings or BenchSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown tasks."""
        # Startup
        logger.info("Starting LLM benchmark API server...")

        owned_store = store is None
        owned_engine = engine is None
        app.state.store = store or build_store(
            settings.storage_backend, settings.database_url, echo=settings.debug
        )
        app.state.engine = engine or EngineClient(
            settings.engine_url,
            run_timeout=settings.engine_timeout_seconds,
            history_timeout=settings.history_timeout_seconds,
            run_path=settings.engine_run_path,
        )
        app.state.orchestrator = BenchmarkOrchestrator(app.state.engine, app.state.store)
        if settings.history_source == "engine":
            app.state.history = EngineHistory(app.state.engine)
        else:
            app.state.history = StoreHistory(app.state.store)

        health_status = app.state.store.health_check()
        if health_status["status"] != "healthy":
            logger.error(f"Benchmark store health check failed: {health_status}")
            raise RuntimeError("Benchmark store is not available")
        logger.info(
            f"Using {app.state.store.backend_name} store, "
            f"{settings.history_source} history, engine at {settings.engine_url}"
        )

        yield

        # Shutdown
        logger.info("Shutting down LLM benchmark API server...")
        if owned_engine:
            await app.state.engine.aclose()
        if owned_store:
            app.state.store.close()

    app = FastAPI(
        redirect_slashes=False,
        title="LLM Benchmark Dashboard API",
        description=(
            "REST API for submitting LLM load tests to the benchmark engine, "
            "browsing their history grouped by model, and exporting results."
        ),
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure CORS for frontend integration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(benchmarks.router, prefix="/api/benchmarks", tags=["benchmarks"])
    app.include_router(models.router, prefix="/api/models", tags=["models"])
    app.include_router(health.router, prefix="/api/health", tags=["health"])

    # Global exception handlers
    @app.exception_handler(LLMBenchError)
    async def llm_bench_exception_handler(request: Request, exc: LLMBenchError):
        """Handle benchmark errors with their own status codes."""
        status_code = status_for_error(exc)
        if status_code >= 500:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Report request parsing failures in the same shape as other errors."""
        status_code, error = request_validation_error(request, exc)
        logger.warning(f"{error.code} on {request.method} {request.url.path}: {error.message}")
        return JSONResponse(status_code=status_code, content=error.to_dict())

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle value errors (usually validation issues)."""
        logger.error(f"Value error: {exc}")
        return JSONResponse(
            status_code=422,
            content={
                "message": str(exc),
                "error": "VALIDATION_ERROR",
                "category": "client",
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unexpected error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "message": "An unexpected error occurred",
                "error": "INTERNAL_ERROR",
                "category": "internal",
            },
        )

    @app.get("/api", response_model=Dict[str, Any])
    async def api_root():
        """API root endpoint with basic information."""
        return {
            "name": "LLM Benchmark Dashboard API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/health",
            "history_source": settings.history_source,
        }

    return app


def run_server(host: str = "127.0.0.1", port: int = 8000, reload: bool = False):
    """Run the FastAPI server with uvicorn."""
    uvicorn.run(
        "llm_bench.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    run_server(reload=False)
