"""Model version grouping, ranking and filtering.

Benchmark records that share a model name form a version group. Everything
here is a pure, read-only transformation over a snapshot of records; the
store never orders anything itself.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .schema import BenchmarkRecord


def recency_key(record: BenchmarkRecord) -> Tuple[Any, int]:
    """Sort key for "most recent first" ordering.

    Ties on ``created_at`` fall back to the id, which is monotonic.
    """
    return (record.created_at, record.id)


@dataclass
class GroupedModel:
    """All benchmark versions of one model, newest first."""

    model: str
    all_versions: List[BenchmarkRecord] = field(default_factory=list)

    @property
    def latest_data(self) -> BenchmarkRecord:
        return self.all_versions[0]

    @property
    def has_multiple_versions(self) -> bool:
        return len(self.all_versions) > 1

    @property
    def version_count(self) -> int:
        return len(self.all_versions)

    def has_favorite(self) -> bool:
        return self.latest_data.favorite or any(v.favorite for v in self.all_versions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "latestData": self.latest_data.to_api_dict(),
            "createdAt": self.latest_data.created_at.isoformat(),
            "allVersions": [version.to_api_dict() for version in self.all_versions],
            "hasMultipleVersions": self.has_multiple_versions,
        }


def group_by_model(records: Iterable[BenchmarkRecord]) -> List[GroupedModel]:
    """
    Partition records into version groups.

    Records without a model name are grouped under the empty string rather
    than dropped. Each group's versions are ordered newest first and the
    groups themselves by their latest version, newest first.

    Args:
        records: Benchmark records in any order

    Returns:
        List of GroupedModel, empty when there are no records
    """
    buckets: Dict[str, List[BenchmarkRecord]] = {}
    for record in records:
        buckets.setdefault(record.model or "", []).append(record)

    groups = [
        GroupedModel(model=model, all_versions=sorted(versions, key=recency_key, reverse=True))
        for model, versions in buckets.items()
    ]
    groups.sort(key=lambda group: recency_key(group.latest_data), reverse=True)
    return groups


def filter_by_search_term(groups: Sequence[GroupedModel], term: Optional[str]) -> List[GroupedModel]:
    """Case-insensitive substring match on the model name."""
    if term is None or not term.strip():
        return list(groups)
    needle = term.lower()
    return [group for group in groups if needle in group.model.lower()]


def filter_by_favorite(groups: Sequence[GroupedModel], only_favorites: bool) -> List[GroupedModel]:
    """Keep groups whose latest or any older version is a favorite."""
    if not only_favorites:
        return list(groups)
    return [group for group in groups if group.has_favorite()]


def latest_for_model(records: Iterable[BenchmarkRecord], model: str) -> Optional[BenchmarkRecord]:
    """Most recent record of one model, or None when the model has no runs."""
    matching = [record for record in records if (record.model or "") == model]
    if not matching:
        return None
    return max(matching, key=recency_key)


def find_group(groups: Sequence[GroupedModel], model: str) -> Optional[GroupedModel]:
    for group in groups:
        if group.model == model:
            return group
    return None


def paginate(items: Sequence[Any], page: int = 1, per_page: int = 10) -> Dict[str, Any]:
    """
    Slice a sequence into one page.

    Args:
        items: Full, already filtered sequence
        page: 1-based page number
        per_page: Items per page

    Returns:
        Dictionary with the page items and pagination info
    """
    if page < 1:
        raise ValueError("Page number must be >= 1")
    if per_page < 1:
        raise ValueError("Items per page must be >= 1")

    total = len(items)
    start = (page - 1) * per_page
    return {
        "items": list(items[start:start + per_page]),
        "total": total,
        "page": page,
        "per_page": per_page,
        "total_pages": math.ceil(total / per_page) if total > 0 else 1,
    }
