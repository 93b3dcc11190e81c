"""Core benchmark components."""

from .schema import (
    BenchmarkConfig,
    BenchmarkRecord,
    BenchmarkResults,
    MetricsBundle,
    MetricStat,
    RunConfiguration,
    Throughput,
    validate_config,
    validate_record,
    validate_results,
)
from .grouping import (
    GroupedModel,
    filter_by_favorite,
    filter_by_search_term,
    group_by_model,
    latest_for_model,
)
from .orchestrator import BenchmarkOrchestrator, Submission, SubmissionState

__all__ = [
    "BenchmarkConfig",
    "BenchmarkOrchestrator",
    "BenchmarkRecord",
    "BenchmarkResults",
    "GroupedModel",
    "MetricStat",
    "MetricsBundle",
    "RunConfiguration",
    "Submission",
    "SubmissionState",
    "Throughput",
    "filter_by_favorite",
    "filter_by_search_term",
    "group_by_model",
    "latest_for_model",
    "validate_config",
    "validate_record",
    "validate_results",
]
