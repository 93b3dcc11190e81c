"""Benchmark run endpoints for the dashboard API.

This module provides REST endpoints to submit load tests, browse the run
history, annotate runs with notes and favorites, and export them.
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status

from ...core.grouping import recency_key
from ...core.history import HistorySource
from ...core.orchestrator import BenchmarkOrchestrator
from ...core.schema import BenchmarkRecord
from ...storage.base import UNSET, BenchmarkStore
from ...visualizations.charts import all_chart_series, performance_scores
from ...visualizations.export import ExcelReportExporter, to_csv, to_json
from ..dependencies import get_history, get_orchestrator, get_writable_store
from ..models import APIResponse, BenchmarkListResponse, ChartsResponse, UpdateBenchmarkRequest

logger = logging.getLogger(__name__)

router = APIRouter()

DISCONNECT_POLL_SECONDS = 1.0

EXPORT_MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


async def _run_until_disconnect(request: Request, coro):
    """Await ``coro``, cancelling it if the HTTP client goes away first."""
    task = asyncio.ensure_future(coro)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning("Client disconnected before the load test finished; cancelling")
                task.cancel()
                return await task
    finally:
        if not task.done():
            task.cancel()


@router.post("/", response_model=BenchmarkRecord, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=BenchmarkRecord, status_code=status.HTTP_201_CREATED)
async def submit_benchmark(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    orchestrator: BenchmarkOrchestrator = Depends(get_orchestrator),
):
    """
    Run a load test on the benchmark engine and store its results.

    Blocks until the engine answers. Validation and engine failures are
    mapped to HTTP errors by the application's exception handlers.

    Returns:
        The stored benchmark record
    """
    record = await _run_until_disconnect(request, orchestrator.submit(payload))
    logger.info(f"Stored benchmark {record.id}")
    return record


@router.get("/", response_model=BenchmarkListResponse)
@router.get("", response_model=BenchmarkListResponse)
async def list_benchmarks(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=1000, description="Records per page"),
    history: HistorySource = Depends(get_history),
):
    """
    List benchmark runs, most recent first.

    Returns:
        One page of records with the total count
    """
    records = sorted(await history.list_records(), key=recency_key, reverse=True)
    start = (page - 1) * limit
    return BenchmarkListResponse(
        results=records[start:start + limit],
        total=len(records),
        page=page,
        limit=limit,
    )


@router.get("/{benchmark_id}", response_model=BenchmarkRecord)
async def get_benchmark(benchmark_id: int, history: HistorySource = Depends(get_history)):
    """Get one benchmark run by id."""
    return await history.get_record(benchmark_id)


@router.patch("/{benchmark_id}", response_model=BenchmarkRecord)
async def update_benchmark(
    benchmark_id: int,
    update_data: UpdateBenchmarkRequest,
    store: BenchmarkStore = Depends(get_writable_store),
):
    """
    Update a run's notes and/or favorite flag.

    Only the fields present in the request body are changed; ``notes: null``
    clears the notes.
    """
    fields = update_data.model_dump(exclude_unset=True)
    record = store.update(
        benchmark_id,
        notes=fields.get("notes", UNSET),
        favorite=fields.get("favorite", UNSET),
    )
    logger.info(f"Updated benchmark {benchmark_id}: {sorted(fields)}")
    return record


@router.delete("/{benchmark_id}", response_model=APIResponse)
async def delete_benchmark(benchmark_id: int, store: BenchmarkStore = Depends(get_writable_store)):
    """Delete a benchmark run. Its id is never handed out again."""
    store.delete(benchmark_id)
    return APIResponse(success=True, message=f"Benchmark {benchmark_id} deleted")


@router.get("/{benchmark_id}/export")
async def export_benchmark(
    benchmark_id: int,
    format: str = Query("json", pattern="^(json|csv|xlsx)$", description="Export format"),
    history: HistorySource = Depends(get_history),
):
    """
    Download one run as JSON, CSV or an Excel workbook.

    Returns:
        The file as an attachment named ``benchmark-<id>.<format>``
    """
    record = await history.get_record(benchmark_id)

    if format == "csv":
        content: Any = to_csv(record)
    elif format == "xlsx":
        content = ExcelReportExporter().to_bytes(record)
    else:
        content = to_json(record)

    filename = f"benchmark-{record.id}.{format}"
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{benchmark_id}/charts", response_model=ChartsResponse)
async def get_benchmark_charts(benchmark_id: int, history: HistorySource = Depends(get_history)):
    """Chart series and performance scores for one run."""
    record = await history.get_record(benchmark_id)
    return ChartsResponse(
        id=record.id,
        model=record.model,
        charts=all_chart_series(record.results),
        scores=performance_scores(record.results),
    )
