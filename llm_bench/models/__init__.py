"""Database models and utilities for benchmark run storage."""

from .benchmark_models import Base, BenchmarkRun, create_tables, drop_tables

__all__ = [
    "Base",
    "BenchmarkRun",
    "create_tables",
    "drop_tables",
]
