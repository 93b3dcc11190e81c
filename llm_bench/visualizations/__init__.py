"""Presentation artifacts derived from benchmark results."""

from .charts import (
    METRIC_KINDS,
    ChartSeries,
    MetricKind,
    ceiling_score,
    chart_series,
    compare_records,
    performance_score,
    performance_scores,
)
from .export import ExcelReportExporter, parse_json, to_csv, to_json

__all__ = [
    "METRIC_KINDS",
    "ChartSeries",
    "ExcelReportExporter",
    "MetricKind",
    "ceiling_score",
    "chart_series",
    "compare_records",
    "parse_json",
    "performance_score",
    "performance_scores",
    "to_csv",
    "to_json",
]
