"""API endpoints package for the benchmark dashboard."""

from . import benchmarks, health, models

__all__ = ["benchmarks", "health", "models"]
