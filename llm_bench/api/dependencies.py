"""FastAPI dependencies for the benchmark API.

Components are created once in the application lifespan and kept on
``app.state``; these helpers hand them to endpoints.
"""

import logging

from fastapi import HTTPException, Request, status

from ..core.history import HistorySource
from ..core.orchestrator import BenchmarkOrchestrator
from ..engine.client import EngineClient
from ..settings import BenchSettings
from ..storage.base import BenchmarkStore
from ..utils.errors import HistoryReadOnlyError

logger = logging.getLogger(__name__)


def _from_state(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        logger.error(f"Application component '{name}' is not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Benchmark service is not ready",
        )
    return component


def get_settings(request: Request) -> BenchSettings:
    return _from_state(request, "settings")


def get_store(request: Request) -> BenchmarkStore:
    return _from_state(request, "store")


def get_engine(request: Request) -> EngineClient:
    return _from_state(request, "engine")


def get_orchestrator(request: Request) -> BenchmarkOrchestrator:
    return _from_state(request, "orchestrator")


def get_history(request: Request) -> HistorySource:
    return _from_state(request, "history")


def get_writable_store(request: Request) -> BenchmarkStore:
    """
    Store for notes/favorite/delete operations.

    Raises:
        HistoryReadOnlyError: when the engine owns the history
    """
    history = get_history(request)
    if history.read_only:
        raise HistoryReadOnlyError(
            "Benchmark history is served by the benchmark API and cannot be modified here"
        )
    return get_store(request)
