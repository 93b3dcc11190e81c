"""Schemas and validators for benchmark configurations and results.

The engine's payloads are duck-typed JSON, so nothing coming from it is
trusted at point of use: every payload passes through one of the
``validate_*`` functions below, which either return a typed, frozen model or
raise a :class:`~llm_bench.utils.errors.SchemaValidationError` listing every
violated field.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlsplit

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)

from ..utils.errors import (
    ConfigInvalidError,
    ResultsInvalidError,
    SchemaValidationError,
    ValidationIssue,
)

DEFAULT_TARGET_URL = "https://dekallm.cloudeka.ai"
DEFAULT_USERS = 100
DEFAULT_SPAWN_RATE = 100
DEFAULT_DURATION = 60
DEFAULT_DATASET = "mteb/banking77"

FOUR_STAT_METRICS = (
    "time_to_first_token",
    "end_to_end_latency",
    "inter_token_latency",
    "token_speed",
)


def _reject_bool(value: Any) -> Any:
    # bool is an int subclass; "true" users or durations are always a mistake
    if isinstance(value, bool):
        raise ValueError("must be an integer, not a boolean")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_absolute_url(value: str) -> str:
    value = value.strip()
    parts = urlsplit(value)
    if not parts.scheme or not parts.netloc:
        raise ValueError("Please enter a valid URL")
    return value


# Submission input


class BenchmarkConfig(BaseModel):
    """Benchmark run configuration submitted by a user."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    url: str = DEFAULT_TARGET_URL
    user: PositiveInt = Field(DEFAULT_USERS, description="Concurrent virtual users")
    spawnrate: PositiveInt = DEFAULT_SPAWN_RATE
    duration: PositiveInt = Field(DEFAULT_DURATION, description="Run length in seconds")
    model: Optional[str] = None
    tokenizer: Optional[str] = None
    dataset: str = DEFAULT_DATASET
    api_key: Optional[SecretStr] = None
    notes: Optional[str] = None

    @field_validator("user", "spawnrate", "duration", mode="before")
    @classmethod
    def _no_booleans(cls, value: Any) -> Any:
        return _reject_bool(value)

    @field_validator("model", "tokenizer", "api_key", mode="before")
    @classmethod
    def _blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        return _check_absolute_url(value)

    @field_validator("dataset")
    @classmethod
    def _dataset_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Dataset must not be empty")
        return value

    def engine_params(self) -> Dict[str, Any]:
        """Query parameters for the engine's run endpoint."""
        params: Dict[str, Any] = {
            "user": self.user,
            "spawnrate": self.spawnrate,
            "url": self.url,
            "duration": self.duration,
            "dataset": self.dataset,
        }
        if self.model:
            params["model"] = self.model
        if self.tokenizer:
            params["tokenizer"] = self.tokenizer
        return params


# Engine result contract


class MetricStat(BaseModel):
    """Distribution summary of one sampled latency or speed metric."""

    model_config = ConfigDict(frozen=True)

    average: float = Field(ge=0, allow_inf_nan=False)
    median: float = Field(ge=0, allow_inf_nan=False)
    minimum: float = Field(ge=0, allow_inf_nan=False)
    maximum: float = Field(ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_ordering(self) -> "MetricStat":
        problems = []
        if self.minimum > self.median:
            problems.append("minimum must not exceed median")
        if self.median > self.maximum:
            problems.append("median must not exceed maximum")
        if not self.minimum <= self.average <= self.maximum:
            problems.append("average must lie between minimum and maximum")
        if problems:
            raise ValueError(", ".join(problems))
        return self


class Throughput(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_tokens_per_second: float = Field(ge=0, allow_inf_nan=False)
    output_tokens_per_second: float = Field(ge=0, allow_inf_nan=False)


class MetricsBundle(BaseModel):
    model_config = ConfigDict(frozen=True)

    time_to_first_token: MetricStat
    end_to_end_latency: MetricStat
    inter_token_latency: MetricStat
    token_speed: MetricStat
    throughput: Throughput


class RunConfiguration(BaseModel):
    """Echo of the parameters the engine actually ran with.

    Unknown keys (including any echoed ``api_key``) are dropped so they are
    never persisted.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    user: int
    spawnrate: int
    model: Optional[str] = None
    tokenizer: Optional[str] = None
    url: str
    duration: int
    dataset: Optional[str] = None
    notes: Optional[str] = None


class BenchmarkResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    metrics: MetricsBundle
    configuration: RunConfiguration


# Persisted entity


class BenchmarkRecord(BaseModel):
    """One persisted benchmark run.

    Only ``notes`` and ``favorite`` ever change after creation; updates
    produce a new frozen instance via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    url: str
    user: int
    spawnrate: int
    duration: int
    model: Optional[str] = None
    tokenizer: Optional[str] = None
    dataset: str = DEFAULT_DATASET
    notes: Optional[str] = None
    favorite: bool = False
    status: str
    results: BenchmarkResults
    created_at: datetime = Field(alias="createdAt")

    @field_validator("favorite", mode="before")
    @classmethod
    def _favorite_default(cls, value: Any) -> Any:
        # older records carry no favorite flag at all
        return False if value is None else value

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        # naive timestamps are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_api_dict(self) -> Dict[str, Any]:
        """JSON-ready dict using the dashboard's field names."""
        return self.model_dump(mode="json", by_alias=True)


# Validation entry points


def collect_issues(error: ValidationError) -> List[ValidationIssue]:
    """Flatten a pydantic error into field-level issues."""
    return issues_from_errors(error.errors())


def issues_from_errors(errors: Sequence[Dict[str, Any]], skip_prefix: Optional[str] = None) -> List[ValidationIssue]:
    """Field-level issues from pydantic-style error dicts.

    ``skip_prefix`` drops a leading location part such as FastAPI's ``body``.
    """
    issues = []
    for item in errors:
        loc = list(item.get("loc", ()))
        if skip_prefix is not None and loc[:1] == [skip_prefix]:
            loc = loc[1:]
        path = ".".join(str(part) for part in loc) or (skip_prefix or "")
        message = item.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        issues.append(ValidationIssue(field_path=path, message=message))
    return issues


def validate_config(payload: Any) -> BenchmarkConfig:
    """Validate a raw configuration payload, applying defaults.

    Raises:
        ConfigInvalidError: listing every violated field
    """
    if isinstance(payload, BenchmarkConfig):
        payload = payload.model_dump()
    try:
        return BenchmarkConfig.model_validate(payload)
    except ValidationError as e:
        raise ConfigInvalidError(collect_issues(e)) from e


def unwrap_results(payload: Any) -> Any:
    """Accept the nested ``BenchmarkResponse{results}`` envelope.

    A bare results object (the legacy flat shape) is passed through as is.
    """
    if isinstance(payload, dict) and "results" in payload and "metrics" not in payload:
        return payload["results"]
    return payload


def validate_results(payload: Any) -> BenchmarkResults:
    """Validate an engine result payload.

    Raises:
        ResultsInvalidError: listing every violated field
    """
    try:
        return BenchmarkResults.model_validate(unwrap_results(payload))
    except ValidationError as e:
        raise ResultsInvalidError(collect_issues(e), prefix="Invalid benchmark results") from e


def validate_record(payload: Any) -> BenchmarkRecord:
    """Validate a full benchmark record, e.g. one served by the engine's history."""
    try:
        return BenchmarkRecord.model_validate(payload)
    except ValidationError as e:
        raise SchemaValidationError(collect_issues(e), prefix="Invalid benchmark record") from e
