"""Unit tests for the submit endpoint's disconnect handling."""

import asyncio

import pytest

from llm_bench.api.endpoints import benchmarks


class StubRequest:
    """Stands in for a Starlette request; only ``is_disconnected`` is used."""

    def __init__(self, disconnected: bool):
        self.disconnected = disconnected
        self.polls = 0

    async def is_disconnected(self) -> bool:
        self.polls += 1
        return self.disconnected


@pytest.fixture(autouse=True)
def fast_polling(monkeypatch):
    monkeypatch.setattr(benchmarks, "DISCONNECT_POLL_SECONDS", 0.01)


class TestRunUntilDisconnect:
    """Test ``_run_until_disconnect``."""

    @pytest.mark.asyncio
    async def test_disconnect_cancels_running_submission(self):
        cancelled = asyncio.Event()

        async def long_submission():
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        request = StubRequest(disconnected=True)

        with pytest.raises(asyncio.CancelledError):
            await benchmarks._run_until_disconnect(request, long_submission())

        assert cancelled.is_set()
        assert request.polls == 1

    @pytest.mark.asyncio
    async def test_connected_client_gets_result(self):
        async def short_submission():
            await asyncio.sleep(0.05)
            return "record"

        request = StubRequest(disconnected=False)

        result = await benchmarks._run_until_disconnect(request, short_submission())

        assert result == "record"
        assert request.polls >= 1

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        async def failing_submission():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await benchmarks._run_until_disconnect(StubRequest(disconnected=False), failing_submission())
