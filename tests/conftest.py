"""Shared fixtures for the llm-bench test suite."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from llm_bench.core.schema import BenchmarkRecord, validate_results
from llm_bench.engine.client import EngineClient

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def results_payload(model="llama-3", status="completed"):
    """A valid engine result body."""
    return {
        "status": status,
        "metrics": {
            "time_to_first_token": {"average": 120.5, "median": 110.0, "minimum": 80.0, "maximum": 300.0},
            "end_to_end_latency": {"average": 2500.0, "median": 2400.0, "minimum": 1500.0, "maximum": 5000.0},
            "inter_token_latency": {"average": 25.0, "median": 24.0, "minimum": 10.0, "maximum": 60.0},
            "token_speed": {"average": 15.0, "median": 14.5, "minimum": 5.0, "maximum": 30.0},
            "throughput": {"input_tokens_per_second": 250.0, "output_tokens_per_second": 50.0},
        },
        "configuration": {
            "user": 10,
            "spawnrate": 5,
            "model": model,
            "tokenizer": None,
            "url": "http://x",
            "duration": 30,
            "dataset": "d",
        },
    }


class EngineStub:
    """Records requests made to the engine and answers with ``responder``."""

    def __init__(self):
        self.calls = []
        self.responder = lambda request: httpx.Response(200, json=results_payload())

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self.responder(request)


@pytest.fixture
def sample_results_payload():
    return results_payload()


@pytest.fixture
def make_results_payload():
    """Factory for engine result bodies, fresh on every call."""
    return results_payload


@pytest.fixture
def record_data():
    """Factory for store ``create`` input."""

    def _make(model="llama-3", notes=None, favorite=False):
        return {
            "url": "http://x",
            "user": 10,
            "spawnrate": 5,
            "duration": 30,
            "model": model,
            "tokenizer": None,
            "dataset": "d",
            "notes": notes,
            "favorite": favorite,
            "status": "completed",
            "results": validate_results(results_payload(model)),
        }

    return _make


@pytest.fixture
def make_record():
    """Factory for standalone records; ``minutes`` offsets ``createdAt``."""

    def _make(benchmark_id, model="llama-3", minutes=0, favorite=False, notes=None):
        return BenchmarkRecord(
            id=benchmark_id,
            url="http://x",
            user=10,
            spawnrate=5,
            duration=30,
            model=model,
            dataset="d",
            notes=notes,
            favorite=favorite,
            status="completed",
            results=validate_results(results_payload(model)),
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )

    return _make


@pytest.fixture
def engine_stub():
    return EngineStub()


@pytest.fixture
def engine_client(engine_stub):
    """EngineClient whose HTTP traffic goes to ``engine_stub``."""
    return EngineClient("http://engine.test", transport=httpx.MockTransport(engine_stub.handler))
