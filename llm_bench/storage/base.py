"""Storage interface shared by the benchmark record stores."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.schema import BenchmarkRecord

# Sentinel for "leave this field unchanged" in partial updates
UNSET: Any = object()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BenchmarkStore(ABC):
    """Keyed collection of benchmark records.

    Implementations must make ``create``/``update``/``delete`` linearizable:
    ids are assigned monotonically and never reused, even after deletion.
    Returned records are frozen snapshots.
    """

    @abstractmethod
    def create(self, record_data: Dict[str, Any]) -> BenchmarkRecord:
        """Persist a new record, assigning ``id`` and ``created_at``."""

    @abstractmethod
    def get(self, benchmark_id: int) -> BenchmarkRecord:
        """Return the record or raise ``BenchmarkNotFoundError``."""

    @abstractmethod
    def list(self, offset: int = 0, limit: Optional[int] = None) -> List[BenchmarkRecord]:
        """Return records in unspecified order."""

    @abstractmethod
    def count(self) -> int:
        """Total number of records."""

    @abstractmethod
    def update(
        self,
        benchmark_id: int,
        notes: Any = UNSET,
        favorite: Any = UNSET,
    ) -> BenchmarkRecord:
        """Partially update the mutable fields of a record."""

    @abstractmethod
    def delete(self, benchmark_id: int) -> None:
        """Remove a record permanently."""

    @property
    def backend_name(self) -> str:
        return self.__class__.__name__

    def health_check(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "backend": self.backend_name,
            "statistics": {"record_count": self.count()},
        }

    def close(self) -> None:
        """Release any resources held by the store."""


def normalize_record_data(record_data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop store-owned keys and fill optional fields with safe defaults."""
    data = dict(record_data)
    for key in ("id", "created_at", "createdAt", "api_key"):
        data.pop(key, None)
    data["model"] = data.get("model") or None
    data["tokenizer"] = data.get("tokenizer") or None
    data["notes"] = data.get("notes")
    data["favorite"] = bool(data.get("favorite", False))
    return data
