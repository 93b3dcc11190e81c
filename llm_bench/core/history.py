"""Sources of benchmark history for the read-side views.

History is served either from the local store or, when the engine itself
is the source of truth, from the engine's own history endpoints. Both
expose the same async interface so the API does not care which is in use.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..engine.client import EngineClient
from ..storage.base import BenchmarkStore
from ..utils.errors import EngineResponseInvalidError, SchemaValidationError
from .schema import BenchmarkRecord, validate_record

logger = logging.getLogger(__name__)


class HistorySource(ABC):
    read_only = False

    @abstractmethod
    async def list_records(self) -> List[BenchmarkRecord]:
        """All known records, unordered."""

    @abstractmethod
    async def get_record(self, benchmark_id: int) -> BenchmarkRecord:
        """One record or ``BenchmarkNotFoundError``."""


class StoreHistory(HistorySource):
    def __init__(self, store: BenchmarkStore):
        self.store = store

    async def list_records(self) -> List[BenchmarkRecord]:
        return self.store.list()

    async def get_record(self, benchmark_id: int) -> BenchmarkRecord:
        return self.store.get(benchmark_id)


class EngineHistory(HistorySource):
    """Read-only history fetched from the engine.

    Records the engine serves are validated like any other engine payload;
    malformed ones are logged and left out of listings.
    """

    read_only = True

    def __init__(self, engine: EngineClient):
        self.engine = engine

    async def list_records(self) -> List[BenchmarkRecord]:
        records = []
        for raw in await self.engine.list_benchmarks():
            try:
                records.append(validate_record(raw))
            except SchemaValidationError as e:
                raw_id = raw.get("id") if isinstance(raw, dict) else None
                logger.warning(f"Skipping malformed engine record {raw_id!r}: {e.message}")
        return records

    async def get_record(self, benchmark_id: int) -> BenchmarkRecord:
        raw = await self.engine.get_benchmark(benchmark_id)
        try:
            return validate_record(raw)
        except SchemaValidationError as e:
            logger.error(f"Engine record {benchmark_id} is malformed: {e.message}")
            raise EngineResponseInvalidError(
                f"Benchmark API returned a malformed record. {e.message}", issues=e.issues
            ) from e
