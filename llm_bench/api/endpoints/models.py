"""Model grouping endpoints for the dashboard data table.

Records are grouped by model name into version histories, then filtered
and paginated; version-to-version comparison works on the same groups.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...core.grouping import (
    GroupedModel,
    filter_by_favorite,
    filter_by_search_term,
    find_group,
    group_by_model,
    paginate,
)
from ...core.history import HistorySource
from ...visualizations.charts import compare_records
from ..dependencies import get_history
from ..models import ComparisonResponse, GroupedModelView, ModelGroupsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_group(history: HistorySource, model: str) -> GroupedModel:
    group = find_group(group_by_model(await history.list_records()), model)
    if group is None:
        raise HTTPException(status_code=404, detail=f"No benchmarks found for model '{model}'")
    return group


@router.get("/", response_model=ModelGroupsResponse)
@router.get("", response_model=ModelGroupsResponse)
async def list_model_groups(
    search: Optional[str] = Query(None, description="Case-insensitive model name filter"),
    favorites: bool = Query(False, description="Only models with a favorited version"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(10, ge=1, le=100, description="Models per page"),
    history: HistorySource = Depends(get_history),
):
    """
    Benchmark history grouped by model, most recently benchmarked first.

    Filters apply to whole groups before pagination.
    """
    groups = group_by_model(await history.list_records())
    total_models = len(groups)
    groups = filter_by_favorite(filter_by_search_term(groups, search), favorites)

    page_info = paginate(groups, page=page, per_page=per_page)
    return ModelGroupsResponse(
        items=[GroupedModelView.model_validate(group.to_dict()) for group in page_info["items"]],
        total=page_info["total"],
        total_models=total_models,
        page=page_info["page"],
        per_page=page_info["per_page"],
        total_pages=page_info["total_pages"],
    )


@router.get("/versions", response_model=GroupedModelView)
async def get_model_versions(
    model: str = Query(..., description="Model name; empty for runs without one"),
    history: HistorySource = Depends(get_history),
):
    """All versions of one model, newest first."""
    group = await _load_group(history, model)
    return GroupedModelView.model_validate(group.to_dict())


@router.get("/compare", response_model=ComparisonResponse)
async def compare_model_versions(
    model: str = Query(..., description="Model name"),
    baseline_id: Optional[int] = Query(None, description="Defaults to the previous version"),
    candidate_id: Optional[int] = Query(None, description="Defaults to the latest version"),
    history: HistorySource = Depends(get_history),
):
    """
    Compare two versions of the same model.

    Without explicit ids the latest version is compared to the one before it.
    """
    group = await _load_group(history, model)
    versions = {record.id: record for record in group.all_versions}

    for requested in (baseline_id, candidate_id):
        if requested is not None and requested not in versions:
            raise HTTPException(
                status_code=404,
                detail=f"Benchmark {requested} is not a version of model '{model}'",
            )

    if candidate_id is None:
        candidate_id = group.latest_data.id
    if baseline_id is None:
        older = [r for r in group.all_versions if r.id != candidate_id]
        if not older:
            raise ValueError(f"Model '{model}' has only one benchmark version to compare")
        baseline_id = older[0].id

    comparison = compare_records(versions[baseline_id], versions[candidate_id])
    logger.info(f"Compared {model!r} versions {baseline_id} -> {candidate_id}")
    return ComparisonResponse(model=model, **comparison)
