"""Storage layer for benchmark record persistence."""

from typing import Optional

from .base import UNSET, BenchmarkStore
from .benchmark_repository import SqlBenchmarkStore
from .database import DatabaseManager
from .memory import InMemoryBenchmarkStore


def build_store(backend: str = "memory", database_url: Optional[str] = None, echo: bool = False) -> BenchmarkStore:
    """Create the benchmark store selected by configuration."""
    if backend == "memory":
        return InMemoryBenchmarkStore()
    if backend == "sql":
        return SqlBenchmarkStore(DatabaseManager(database_url, echo=echo))
    raise ValueError(f"Unsupported storage backend: {backend}. Use 'memory' or 'sql'.")


__all__ = [
    "UNSET",
    "BenchmarkStore",
    "DatabaseManager",
    "InMemoryBenchmarkStore",
    "SqlBenchmarkStore",
    "build_store",
]
