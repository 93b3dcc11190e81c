"""In-process benchmark store."""

import logging
import threading
from typing import Any, Dict, List, Optional

from ..core.schema import BenchmarkRecord
from ..utils.errors import BenchmarkNotFoundError
from .base import UNSET, BenchmarkStore, normalize_record_data, utc_now

logger = logging.getLogger(__name__)


class InMemoryBenchmarkStore(BenchmarkStore):
    """Benchmark store backed by a dict, living for the process lifetime.

    Records are frozen models, so handing them out to readers is safe; a
    record only becomes visible once it is fully built.
    """

    def __init__(self):
        self._records: Dict[int, BenchmarkRecord] = {}
        self._last_id = 0
        self._lock = threading.Lock()

    @property
    def backend_name(self) -> str:
        return "memory"

    def create(self, record_data: Dict[str, Any]) -> BenchmarkRecord:
        data = normalize_record_data(record_data)
        with self._lock:
            benchmark_id = self._last_id + 1
            record = BenchmarkRecord(id=benchmark_id, created_at=utc_now(), **data)
            self._records[benchmark_id] = record
            self._last_id = benchmark_id

        logger.info(f"Stored benchmark {benchmark_id} (model={record.model!r})")
        return record

    def get(self, benchmark_id: int) -> BenchmarkRecord:
        record = self._records.get(benchmark_id)
        if record is None:
            raise BenchmarkNotFoundError(benchmark_id)
        return record

    def list(self, offset: int = 0, limit: Optional[int] = None) -> List[BenchmarkRecord]:
        with self._lock:
            records = [self._records[key] for key in sorted(self._records)]
        end = None if limit is None else offset + limit
        return records[offset:end]

    def count(self) -> int:
        return len(self._records)

    def update(
        self,
        benchmark_id: int,
        notes: Any = UNSET,
        favorite: Any = UNSET,
    ) -> BenchmarkRecord:
        changes: Dict[str, Any] = {}
        if notes is not UNSET:
            changes["notes"] = notes
        if favorite is not UNSET:
            changes["favorite"] = bool(favorite)

        with self._lock:
            record = self._records.get(benchmark_id)
            if record is None:
                raise BenchmarkNotFoundError(benchmark_id)
            if changes:
                record = record.model_copy(update=changes)
                self._records[benchmark_id] = record

        logger.info(f"Updated benchmark {benchmark_id}: {sorted(changes)}")
        return record

    def delete(self, benchmark_id: int) -> None:
        with self._lock:
            if self._records.pop(benchmark_id, None) is None:
                raise BenchmarkNotFoundError(benchmark_id)
        logger.info(f"Deleted benchmark {benchmark_id}")
