"""End-to-end coordination of one benchmark submission.

A submission moves through ``VALIDATING -> DISPATCHING -> AWAITING_RESPONSE``
and ends in ``COMPLETED`` or ``FAILED``. The engine call happens before any
store mutation, so the store is never locked while a load test runs, and a
failed submission never leaves a partial record behind.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..engine.client import EngineClient
from ..storage.base import BenchmarkStore
from ..utils.errors import (
    ConfigInvalidError,
    EngineError,
    EngineResponseInvalidError,
    LLMBenchError,
    ResultsInvalidError,
)
from .schema import BenchmarkConfig, BenchmarkRecord, BenchmarkResults, validate_config, validate_results

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    VALIDATING = "validating"
    DISPATCHING = "dispatching"
    AWAITING_RESPONSE = "awaiting_response"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = {SubmissionState.COMPLETED, SubmissionState.FAILED}


@dataclass
class Submission:
    """Observable progress of one submission."""

    state: Optional[SubmissionState] = None
    history: List[SubmissionState] = field(default_factory=list)
    error: Optional[LLMBenchError] = None
    record: Optional[BenchmarkRecord] = None

    def advance(self, state: SubmissionState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Submission already finished in state {self.state.value}")
        self.state = state
        self.history.append(state)
        logger.debug(f"Submission -> {state.value}")

    def fail(self, error: Optional[LLMBenchError] = None) -> None:
        self.error = error
        self.advance(SubmissionState.FAILED)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES


def build_record_data(config: BenchmarkConfig, results: BenchmarkResults) -> Dict[str, Any]:
    """Map a validated config and engine results onto record fields.

    Model, tokenizer and dataset prefer what the engine reports it actually
    ran with and fall back to the submitted values.
    """
    echo = results.configuration
    return {
        "url": config.url,
        "user": config.user,
        "spawnrate": config.spawnrate,
        "duration": config.duration,
        "model": echo.model or config.model,
        "tokenizer": echo.tokenizer or config.tokenizer,
        "dataset": echo.dataset or config.dataset,
        "notes": config.notes,
        "favorite": False,
        "status": results.status,
        "results": results,
    }


class BenchmarkOrchestrator:
    """Runs benchmark submissions against the engine and persists results."""

    def __init__(self, engine: EngineClient, store: BenchmarkStore):
        self.engine = engine
        self.store = store

    async def submit(self, payload: Any, submission: Optional[Submission] = None) -> BenchmarkRecord:
        """
        Validate, dispatch, validate the response, then persist.

        Args:
            payload: Raw configuration payload
            submission: Optional tracker the caller can inspect afterwards

        Returns:
            The newly persisted BenchmarkRecord

        Raises:
            ConfigInvalidError: the payload is malformed; the engine is not called
            EngineUnreachableError, EngineTimeoutError: connectivity failures
            EngineRejectedError: the engine answered with an error status
            EngineResponseInvalidError: the engine's body violates the result schema
        """
        submission = submission if submission is not None else Submission()

        submission.advance(SubmissionState.VALIDATING)
        try:
            config = validate_config(payload)
        except ConfigInvalidError as e:
            logger.warning(f"Rejected benchmark configuration: {e.message}")
            submission.fail(e)
            raise

        submission.advance(SubmissionState.DISPATCHING)
        try:
            submission.advance(SubmissionState.AWAITING_RESPONSE)
            body = await self.engine.run_load_test(config)
        except EngineError as e:
            logger.error(f"Benchmark run failed ({e.code}): {e.message}")
            submission.fail(e)
            raise
        except asyncio.CancelledError:
            # the engine may keep running the test; nothing is persisted
            logger.warning(f"Benchmark submission for {config.url} cancelled by caller")
            submission.fail()
            raise

        try:
            results = validate_results(body)
        except ResultsInvalidError as e:
            error = EngineResponseInvalidError(
                f"Benchmark API returned results that do not match the expected schema. {e.message}",
                issues=e.issues,
            )
            keys = sorted(body) if isinstance(body, dict) else type(body).__name__
            logger.error(
                f"Invalid engine response for {config.url} (model={config.model!r}, "
                f"top-level keys={keys}): {e.message}"
            )
            submission.fail(error)
            raise error from e

        try:
            record = self.store.create(build_record_data(config, results))
        except Exception:
            logger.error(f"Failed to persist benchmark results for {config.url}", exc_info=True)
            submission.fail()
            raise
        submission.record = record
        submission.advance(SubmissionState.COMPLETED)
        logger.info(
            f"Benchmark {record.id} completed for model {record.model!r} "
            f"(status={record.status})"
        )
        return record
