"""Chart series and performance scores derived from benchmark results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.schema import FOUR_STAT_METRICS, BenchmarkRecord, BenchmarkResults

# Reference points for the dashboard's 0-100 scores
LATENCY_WORST_MS = 10000.0
LATENCY_BEST_MS = 1000.0
THROUGHPUT_CEILING_TPS = 100.0
TOKEN_SPEED_CEILING_TPS = 30.0


class MetricKind(str, Enum):
    FOUR_STAT = "four_stat"
    THROUGHPUT = "throughput"


@dataclass(frozen=True)
class MetricInfo:
    key: str
    kind: MetricKind
    title: str
    unit: str
    lower_is_better: bool
    color: str


# Resolved once; call sites never re-detect a metric's shape
METRIC_KINDS: Dict[str, MetricInfo] = {
    "time_to_first_token": MetricInfo(
        "time_to_first_token", MetricKind.FOUR_STAT, "Time to First Token", "ms", True, "2E86AB"
    ),
    "end_to_end_latency": MetricInfo(
        "end_to_end_latency", MetricKind.FOUR_STAT, "End-to-End Latency", "ms", True, "A23B72"
    ),
    "inter_token_latency": MetricInfo(
        "inter_token_latency", MetricKind.FOUR_STAT, "Inter-Token Latency", "ms", True, "F18F01"
    ),
    "token_speed": MetricInfo(
        "token_speed", MetricKind.FOUR_STAT, "Token Speed", "tokens/s", False, "C73E1D"
    ),
    "throughput": MetricInfo(
        "throughput", MetricKind.THROUGHPUT, "Throughput", "tokens/s", False, "28A745"
    ),
}

FOUR_STAT_LABELS = ["Average", "Median", "Min", "Max"]
THROUGHPUT_LABELS = ["Input Tokens/s", "Output Tokens/s"]


@dataclass
class ChartSeries:
    data: List[float] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"data": list(self.data), "labels": list(self.labels)}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def performance_score(value: float, worst_case: float, best_case: float) -> float:
    """
    Score a lower-is-better metric on a 0-100 scale.

    Linear between ``worst_case`` (0) and ``best_case`` (100), clamped.
    Returns 0 when the two reference points coincide.
    """
    if worst_case == best_case:
        return 0.0
    return _clamp((worst_case - value) / (worst_case - best_case) * 100)


def ceiling_score(value: float, ceiling: float) -> float:
    """Score a higher-is-better metric as a clamped percentage of ``ceiling``."""
    if ceiling <= 0:
        return 0.0
    return _clamp(value / ceiling * 100)


def performance_scores(results: BenchmarkResults) -> Dict[str, float]:
    """Latency, throughput and token speed scores shown on the dashboard."""
    metrics = results.metrics
    return {
        "latency": performance_score(
            metrics.end_to_end_latency.average, LATENCY_WORST_MS, LATENCY_BEST_MS
        ),
        "throughput": ceiling_score(
            metrics.throughput.output_tokens_per_second, THROUGHPUT_CEILING_TPS
        ),
        "token_speed": ceiling_score(metrics.token_speed.average, TOKEN_SPEED_CEILING_TPS),
    }


def chart_series(results: Optional[BenchmarkResults], metric_key: str) -> ChartSeries:
    """
    Build the value/label pairs for one metric's chart.

    Args:
        results: Validated benchmark results
        metric_key: One of the keys of ``METRIC_KINDS``

    Returns:
        ChartSeries, empty for unknown keys or missing results
    """
    info = METRIC_KINDS.get(metric_key)
    if results is None or info is None:
        return ChartSeries()

    if info.kind is MetricKind.THROUGHPUT:
        throughput = results.metrics.throughput
        return ChartSeries(
            data=[throughput.input_tokens_per_second, throughput.output_tokens_per_second],
            labels=list(THROUGHPUT_LABELS),
        )

    stat = getattr(results.metrics, metric_key)
    return ChartSeries(
        data=[stat.average, stat.median, stat.minimum, stat.maximum],
        labels=list(FOUR_STAT_LABELS),
    )


def all_chart_series(results: BenchmarkResults) -> Dict[str, Dict[str, Any]]:
    """Chart series for every known metric, with display metadata."""
    charts = {}
    for key, info in METRIC_KINDS.items():
        series = chart_series(results, key).to_dict()
        series.update({"title": info.title, "unit": info.unit, "color": info.color})
        charts[key] = series
    return charts


def _relative_change(baseline: float, candidate: float) -> Optional[float]:
    if baseline == 0:
        return None
    return (candidate - baseline) / baseline * 100


def compare_records(baseline: BenchmarkRecord, candidate: BenchmarkRecord) -> Dict[str, Any]:
    """
    Compare two benchmark runs metric by metric.

    For four-statistic metrics the averages are compared; for throughput
    both directions are compared. ``improved`` accounts for whether lower
    or higher values are better.

    Args:
        baseline: Reference run (usually the previous version)
        candidate: Run being judged (usually the latest version)

    Returns:
        Dictionary keyed by metric with baseline/candidate values and deltas
    """
    base_metrics = baseline.results.metrics
    cand_metrics = candidate.results.metrics
    comparisons: Dict[str, Any] = {}

    for key in FOUR_STAT_METRICS:
        info = METRIC_KINDS[key]
        before = getattr(base_metrics, key).average
        after = getattr(cand_metrics, key).average
        delta = after - before
        comparisons[key] = {
            "baseline": before,
            "candidate": after,
            "delta": delta,
            "percent_change": _relative_change(before, after),
            "improved": delta < 0 if info.lower_is_better else delta > 0,
        }

    for direction in ("input_tokens_per_second", "output_tokens_per_second"):
        before = getattr(base_metrics.throughput, direction)
        after = getattr(cand_metrics.throughput, direction)
        comparisons[f"throughput.{direction}"] = {
            "baseline": before,
            "candidate": after,
            "delta": after - before,
            "percent_change": _relative_change(before, after),
            "improved": after > before,
        }

    return {
        "baseline_id": baseline.id,
        "candidate_id": candidate.id,
        "metrics": comparisons,
        "scores": {
            "baseline": performance_scores(baseline.results),
            "candidate": performance_scores(candidate.results),
        },
    }
