"""
llm-bench: backend for the LLM load-test benchmark dashboard.

Submit a load-test configuration, let the benchmark engine run it, and keep
the validated results for browsing, grouping and export:
    orchestrator = BenchmarkOrchestrator(engine, store)
    record = await orchestrator.submit({"url": "https://...", "user": 10, ...})
"""

__version__ = "0.1.0"

from .core.orchestrator import BenchmarkOrchestrator
from .core.schema import BenchmarkConfig, BenchmarkRecord, BenchmarkResults
from .engine.client import EngineClient
from .settings import BenchSettings
from .storage import build_store

__all__ = [
    "BenchSettings",
    "BenchmarkConfig",
    "BenchmarkOrchestrator",
    "BenchmarkRecord",
    "BenchmarkResults",
    "EngineClient",
    "build_store",
]
