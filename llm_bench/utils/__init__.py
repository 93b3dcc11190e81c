"""Shared utilities."""

from .errors import (
    BenchmarkNotFoundError,
    ConfigInvalidError,
    EngineError,
    EngineRejectedError,
    EngineResponseInvalidError,
    EngineTimeoutError,
    EngineUnreachableError,
    HistoryReadOnlyError,
    LLMBenchError,
    ResultsInvalidError,
    SchemaValidationError,
    ValidationIssue,
)

__all__ = [
    "BenchmarkNotFoundError",
    "ConfigInvalidError",
    "EngineError",
    "EngineRejectedError",
    "EngineResponseInvalidError",
    "EngineTimeoutError",
    "EngineUnreachableError",
    "HistoryReadOnlyError",
    "LLMBenchError",
    "ResultsInvalidError",
    "SchemaValidationError",
    "ValidationIssue",
]
