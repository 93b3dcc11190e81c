"""Custom exceptions for the benchmark dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ValidationIssue:
    """One violated field and the human-readable reason."""

    field_path: str
    message: str

    def __str__(self) -> str:
        if not self.field_path:
            return self.message
        return f"{self.field_path}: {self.message}"


class LLMBenchError(Exception):
    """Base exception for all llm-bench errors."""

    code = "LLM_BENCH_ERROR"
    category = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "error": self.code,
            "category": self.category,
        }


class SchemaValidationError(LLMBenchError):
    """Raised when a payload does not satisfy a benchmark schema.

    Carries every violated field, not just the first one.
    """

    code = "SCHEMA_INVALID"
    category = "client"

    def __init__(self, issues: List[ValidationIssue], prefix: str = "Validation error"):
        self.issues = list(issues)
        super().__init__(format_issues(self.issues, prefix=prefix))

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["details"] = [
            {"field": issue.field_path, "message": issue.message}
            for issue in self.issues
        ]
        return data


class ConfigInvalidError(SchemaValidationError):
    """Raised when a submitted benchmark configuration is malformed."""

    code = "CONFIG_INVALID"


class ResultsInvalidError(SchemaValidationError):
    """Raised when a benchmark result payload is malformed."""

    code = "RESULTS_INVALID"
    category = "contract"


class BenchmarkNotFoundError(LLMBenchError):
    """Raised when a benchmark record id is unknown to the store."""

    code = "NOT_FOUND"
    category = "client"

    def __init__(self, benchmark_id: int):
        self.benchmark_id = benchmark_id
        super().__init__(f"Benchmark test {benchmark_id} not found")


class HistoryReadOnlyError(LLMBenchError):
    """Raised when mutating a history that is owned by the engine."""

    code = "HISTORY_READ_ONLY"
    category = "client"


class EngineError(LLMBenchError):
    """Base class for failures talking to the benchmark engine."""

    code = "ENGINE_ERROR"
    category = "engine"


class EngineUnreachableError(EngineError):
    """Raised when the engine refuses or drops the connection."""

    code = "ENGINE_UNREACHABLE"
    category = "connectivity"

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "Cannot connect to the benchmark API server. The server may be "
            "down or the API URL might be incorrect."
        )


class EngineTimeoutError(EngineError):
    """Raised when the engine does not answer within the configured timeout."""

    code = "ENGINE_TIMEOUT"
    category = "connectivity"

    def __init__(self, timeout: Optional[float] = None):
        message = (
            "The benchmark API request timed out. The load test might be "
            "taking too long to complete."
        )
        if timeout is not None:
            message = f"{message} (timeout: {timeout:g}s)"
        self.timeout = timeout
        super().__init__(message)


class EngineRejectedError(EngineError):
    """Raised when the engine answers with a non-2xx status."""

    code = "ENGINE_REJECTED"

    def __init__(self, status_code: int, engine_message: Optional[str] = None):
        self.status_code = status_code
        self.engine_message = engine_message
        detail = engine_message or f"HTTP {status_code}"
        if status_code == 400:
            message = f"Bad request. Please check the test parameters: {detail}"
        elif status_code == 401:
            message = "Authentication failed. API access requires valid credentials."
        else:
            message = f"Benchmark API Error: {detail}"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        if self.engine_message:
            data["original_message"] = self.engine_message
        return data


class EngineResponseInvalidError(EngineError):
    """Raised when a 2xx engine response violates the result contract."""

    code = "ENGINE_RESPONSE_INVALID"
    category = "contract"

    def __init__(self, message: str, issues: Optional[List[ValidationIssue]] = None):
        self.issues = list(issues or [])
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.issues:
            data["details"] = [
                {"field": issue.field_path, "message": issue.message}
                for issue in self.issues
            ]
        return data


def format_issues(issues: List[ValidationIssue], prefix: str = "Validation error") -> str:
    """Combine validation issues into a single readable message."""
    if not issues:
        return prefix
    joined = "; ".join(str(issue) for issue in issues)
    return f"{prefix}: {joined}"
