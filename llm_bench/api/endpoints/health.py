"""Health check endpoints for API monitoring."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ... import __version__
from ...engine.client import EngineClient
from ...settings import BenchSettings
from ...storage.base import BenchmarkStore
from ...utils.errors import EngineError
from ..dependencies import get_engine, get_settings, get_store
from ..models import HealthCheckResponse, StoreHealth

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
@router.get("", response_model=HealthCheckResponse)
async def health_check(
    store: BenchmarkStore = Depends(get_store),
    settings: BenchSettings = Depends(get_settings),
):
    """
    Health check for the API and the benchmark store.

    Returns:
        Health status including store statistics
    """
    store_health = store.health_check()
    overall_status = "healthy" if store_health["status"] == "healthy" else "unhealthy"
    return HealthCheckResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        store=StoreHealth(**store_health),
        history_source=settings.history_source,
        version=__version__,
    )


@router.get("/engine")
async def engine_health(engine: EngineClient = Depends(get_engine)):
    """
    Benchmark engine availability, as shown by the dashboard's status banner.

    Returns:
        Engine status; 503 when it cannot be reached or answers with 5xx
    """
    try:
        engine_status = await engine.ping()
    except EngineError as e:
        logger.warning(f"Benchmark engine health check failed: {e.message}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unavailable",
                "engine_url": engine.base_url,
                "message": e.message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    status_code = 200 if engine_status["status"] == "available" else 503
    return JSONResponse(status_code=status_code, content=engine_status)


@router.get("/ready")
async def readiness_check(store: BenchmarkStore = Depends(get_store)):
    """
    Readiness check for container orchestration.

    Returns:
        Simple ready/not ready status
    """
    store_health = store.health_check()
    if store_health["status"] != "healthy":
        logger.error(f"Readiness check failed: {store_health}")
        raise HTTPException(
            status_code=503,
            detail={"status": "not ready", "reason": "benchmark store unhealthy"},
        )
    return {"status": "ready"}
