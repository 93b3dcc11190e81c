"""Repository pattern for benchmark run data access."""

import logging
import threading
from typing import Any, Dict, List, Optional

from sqlalchemy import func

from ..core.schema import BenchmarkRecord, BenchmarkResults
from ..models.benchmark_models import BenchmarkRun
from ..utils.errors import BenchmarkNotFoundError
from .base import UNSET, BenchmarkStore, normalize_record_data, utc_now
from .database import DatabaseManager

logger = logging.getLogger(__name__)


class SqlBenchmarkStore(BenchmarkStore):
    """Benchmark store persisted through SQLAlchemy.

    Rows are converted to frozen ``BenchmarkRecord`` snapshots inside the
    session, so nothing handed out is attached to a live session.
    """

    def __init__(self, db_manager: DatabaseManager):
        """
        Initialize repository.

        Args:
            db_manager: Database manager owning the engine and sessions
        """
        self._db_manager = db_manager
        self._write_lock = threading.Lock()

    @property
    def backend_name(self) -> str:
        return "sql"

    # CRUD Operations

    def create(self, record_data: Dict[str, Any]) -> BenchmarkRecord:
        """
        Create a new benchmark run.

        Args:
            record_data: Run fields without ``id`` or ``created_at``

        Returns:
            Created BenchmarkRecord
        """
        data = normalize_record_data(record_data)
        results = data.pop("results")
        if not isinstance(results, BenchmarkResults):
            results = BenchmarkResults.model_validate(results)

        with self._write_lock, self._db_manager.get_session() as session:
            run = BenchmarkRun(
                results=results.model_dump(mode="json"),
                created_at=utc_now(),
                **data,
            )
            session.add(run)
            session.flush()  # assigns the id
            record = BenchmarkRecord.model_validate(run.to_dict())

        logger.info(f"Stored benchmark {record.id} (model={record.model!r})")
        return record

    def get(self, benchmark_id: int) -> BenchmarkRecord:
        with self._db_manager.get_session() as session:
            run = session.get(BenchmarkRun, benchmark_id)
            record = None if run is None else BenchmarkRecord.model_validate(run.to_dict())

        if record is None:
            raise BenchmarkNotFoundError(benchmark_id)
        return record

    def list(self, offset: int = 0, limit: Optional[int] = None) -> List[BenchmarkRecord]:
        with self._db_manager.get_session() as session:
            query = session.query(BenchmarkRun).order_by(BenchmarkRun.id).offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [BenchmarkRecord.model_validate(run.to_dict()) for run in query.all()]

    def count(self) -> int:
        with self._db_manager.get_session() as session:
            return session.query(func.count(BenchmarkRun.id)).scalar() or 0

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

        with self._write_lock, self._db_manager.get_session() as session:
            run = session.get(BenchmarkRun, benchmark_id)
            record = None
            if run is not None:
                for key, value in changes.items():
                    setattr(run, key, value)
                session.flush()
                record = BenchmarkRecord.model_validate(run.to_dict())

        if record is None:
            raise BenchmarkNotFoundError(benchmark_id)
        logger.info(f"Updated benchmark {benchmark_id}: {sorted(changes)}")
        return record

    def delete(self, benchmark_id: int) -> None:
        with self._write_lock, self._db_manager.get_session() as session:
            run = session.get(BenchmarkRun, benchmark_id)
            if run is not None:
                session.delete(run)

        if run is None:
            raise BenchmarkNotFoundError(benchmark_id)
        logger.info(f"Deleted benchmark {benchmark_id}")

    def health_check(self) -> Dict[str, Any]:
        health = self._db_manager.health_check()
        health["backend"] = self.backend_name
        return health

    def close(self) -> None:
        self._db_manager.close()
