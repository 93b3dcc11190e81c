"""Unit tests for the benchmark engine HTTP client."""

import httpx
import pytest

from llm_bench.core.schema import validate_config
from llm_bench.engine.client import EngineClient
from llm_bench.utils.errors import (
    BenchmarkNotFoundError,
    EngineRejectedError,
    EngineResponseInvalidError,
    EngineTimeoutError,
    EngineUnreachableError,
)


@pytest.fixture
def config():
    return validate_config(
        {"url": "http://x", "user": 10, "spawnrate": 5, "duration": 30, "dataset": "d", "model": "llama-3"}
    )


class TestRunLoadTest:
    """Test the run call."""

    @pytest.mark.asyncio
    async def test_sends_query_parameters(self, engine_client, engine_stub, config, sample_results_payload):
        body = await engine_client.run_load_test(config)

        assert body == sample_results_payload
        request = engine_stub.calls[0]
        assert request.method == "POST"
        assert request.url.path == "/run-load-test"
        assert dict(request.url.params) == {
            "user": "10",
            "spawnrate": "5",
            "url": "http://x",
            "duration": "30",
            "dataset": "d",
            "model": "llama-3",
        }
        assert "authorization" not in request.headers
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_api_key_sent_as_bearer_token(self, engine_client, engine_stub):
        config = validate_config({"url": "http://x", "api_key": "sk-123"})

        await engine_client.run_load_test(config)

        request = engine_stub.calls[0]
        assert request.headers["authorization"] == "Bearer sk-123"
        assert "api_key" not in request.url.params
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_custom_run_path(self, engine_stub, config):
        client = EngineClient(
            "http://engine.test/",
            run_path="/benchmarks/run",
            transport=httpx.MockTransport(engine_stub.handler),
        )

        await client.run_load_test(config)

        assert engine_stub.calls[0].url.path == "/benchmarks/run"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connect_error(self, engine_client, engine_stub, config):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        engine_stub.responder = refuse

        with pytest.raises(EngineUnreachableError) as exc_info:
            await engine_client.run_load_test(config)

        assert exc_info.value.category == "connectivity"
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_connect_timeout_is_unreachable(self, engine_client, engine_stub, config):
        def blackhole(request):
            raise httpx.ConnectTimeout("connect timed out", request=request)

        engine_stub.responder = blackhole

        with pytest.raises(EngineUnreachableError):
            await engine_client.run_load_test(config)
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_connect_timeout_is_bounded(self, engine_client, engine_stub, config):
        await engine_client.run_load_test(config)

        timeouts = engine_stub.calls[0].extensions["timeout"]
        assert timeouts["connect"] == 10.0
        assert timeouts["read"] == 600.0
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_timeout(self, engine_client, engine_stub, config):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        engine_stub.responder = slow

        with pytest.raises(EngineTimeoutError) as exc_info:
            await engine_client.run_load_test(config)

        assert exc_info.value.category == "connectivity"
        assert exc_info.value.timeout == 600
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_rejected_with_engine_message(self, engine_client, engine_stub, config):
        engine_stub.responder = lambda request: httpx.Response(400, json={"detail": "duration too long"})

        with pytest.raises(EngineRejectedError) as exc_info:
            await engine_client.run_load_test(config)

        error = exc_info.value
        assert error.status_code == 400
        assert error.engine_message == "duration too long"
        assert "duration too long" in error.message
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_rejected_unauthorized(self, engine_client, engine_stub, config):
        engine_stub.responder = lambda request: httpx.Response(401, text="")

        with pytest.raises(EngineRejectedError) as exc_info:
            await engine_client.run_load_test(config)

        assert exc_info.value.message.startswith("Authentication failed")
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_rejected_server_error_plain_text(self, engine_client, engine_stub, config):
        engine_stub.responder = lambda request: httpx.Response(500, text="worker crashed")

        with pytest.raises(EngineRejectedError) as exc_info:
            await engine_client.run_load_test(config)

        assert exc_info.value.engine_message == "worker crashed"
        await engine_client.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [b"", b"   ", b"<html>oops</html>"])
    async def test_invalid_body(self, engine_client, engine_stub, config, content):
        engine_stub.responder = lambda request: httpx.Response(200, content=content)

        with pytest.raises(EngineResponseInvalidError):
            await engine_client.run_load_test(config)
        await engine_client.aclose()


class TestHistory:
    """Test the engine history calls."""

    @pytest.mark.asyncio
    async def test_list_accepts_envelope_and_bare_list(self, engine_client, engine_stub):
        engine_stub.responder = lambda request: httpx.Response(200, json={"results": [{"id": 1}], "total": 1})
        assert await engine_client.list_benchmarks() == [{"id": 1}]

        engine_stub.responder = lambda request: httpx.Response(200, json=[{"id": 2}])
        assert await engine_client.list_benchmarks() == [{"id": 2}]
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_list_rejects_other_shapes(self, engine_client, engine_stub):
        engine_stub.responder = lambda request: httpx.Response(200, json={"items": []})

        with pytest.raises(EngineResponseInvalidError):
            await engine_client.list_benchmarks()
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_get_not_found(self, engine_client, engine_stub):
        engine_stub.responder = lambda request: httpx.Response(404, json={"error": "missing"})

        with pytest.raises(BenchmarkNotFoundError):
            await engine_client.get_benchmark(9)

        assert engine_stub.calls[0].url.path == "/benchmarks/9"
        await engine_client.aclose()

    @pytest.mark.asyncio
    async def test_ping(self, engine_client, engine_stub):
        engine_stub.responder = lambda request: httpx.Response(404)
        assert (await engine_client.ping())["status"] == "available"

        engine_stub.responder = lambda request: httpx.Response(503)
        assert (await engine_client.ping())["status"] == "unavailable"
        await engine_client.aclose()
