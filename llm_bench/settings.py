from __future__ import annotations

from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BenchSettings(BaseSettings):
    """Runtime configuration for the benchmark dashboard backend."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_BENCH_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Core
    environment: str = Field(default="dev")
    debug: bool = Field(default=False)

    # Benchmark engine
    engine_url: str = Field(
        default="http://localhost",
        validation_alias=AliasChoices("LLM_BENCH_ENGINE_URL", "BENCHMARK_API_URL"),
    )
    engine_run_path: str = Field(default="/run-load-test")
    engine_timeout_seconds: float = Field(default=600.0, gt=0)  # load tests are long-lived
    history_timeout_seconds: float = Field(default=10.0, gt=0)

    # Storage
    storage_backend: str = Field(default="memory", pattern="^(memory|sql)$")
    database_url: str = Field(default="sqlite:///./llm_bench_runs.db")
    history_source: str = Field(default="local", pattern="^(local|engine)$")

    # HTTP
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5000",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5000",
        ]
    )
