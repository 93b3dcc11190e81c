"""Pydantic models for API request/response validation.

Benchmark records themselves are served as ``BenchmarkRecord`` from
``llm_bench.core.schema``; the models here wrap them into list, grouping,
chart and health responses using the dashboard's field names.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator

from ..core.schema import BenchmarkRecord

# Base response models


class APIResponse(BaseModel):
    """Base API response model."""

    success: bool = True
    message: Optional[str] = None


# Benchmark Models


class BenchmarkListResponse(BaseModel):
    """Paginated benchmark history, newest first."""

    results: List[BenchmarkRecord]
    total: int
    page: int = Field(ge=1)
    limit: int = Field(ge=1)


class UpdateBenchmarkRequest(BaseModel):
    """Request model for annotating a benchmark run."""

    model_config = ConfigDict(extra="forbid")

    notes: Optional[str] = None
    favorite: Optional[StrictBool] = None

    @model_validator(mode="after")
    def _favorite_not_null(self) -> "UpdateBenchmarkRequest":
        if "favorite" in self.model_fields_set and self.favorite is None:
            raise ValueError("favorite must be true or false")
        return self


class ChartsResponse(BaseModel):
    id: int
    model: Optional[str] = None
    charts: Dict[str, Dict[str, Any]]
    scores: Dict[str, float]


# Grouping Models


class GroupedModelView(BaseModel):
    """One model's version history as shown in the data table."""

    model_config = ConfigDict(protected_namespaces=())

    model: str
    latestData: BenchmarkRecord
    createdAt: datetime
    allVersions: List[BenchmarkRecord]
    hasMultipleVersions: bool


class ModelGroupsResponse(BaseModel):
    items: List[GroupedModelView]
    total: int
    total_models: int
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    total_pages: int


class ComparisonResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model: str
    baseline_id: int
    candidate_id: int
    metrics: Dict[str, Dict[str, Any]]
    scores: Dict[str, Dict[str, float]]


# Health Check Models


class StoreHealth(BaseModel):
    status: str
    backend: Optional[str] = None
    database_url: Optional[str] = None
    connection_test: Optional[bool] = None
    statistics: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Complete health check response."""

    status: str
    timestamp: datetime
    store: StoreHealth
    history_source: str
    version: str

