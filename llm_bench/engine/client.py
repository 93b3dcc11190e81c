"""HTTP client for the external benchmark engine.

The engine executes the actual load test. This client only knows its
request/response shape and turns transport failures into the typed engine
errors; it never retries, since re-running a long load test is not safe.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.schema import BenchmarkConfig
from ..utils.errors import (
    BenchmarkNotFoundError,
    EngineRejectedError,
    EngineResponseInvalidError,
    EngineTimeoutError,
    EngineUnreachableError,
)

logger = logging.getLogger(__name__)

DEFAULT_RUN_TIMEOUT = 600.0
DEFAULT_HISTORY_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_RUN_PATH = "/run-load-test"


def _engine_message(response: httpx.Response) -> Optional[str]:
    """Best-effort human-readable message from an engine error response."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:200] if text else (response.reason_phrase or None)

    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or None


class EngineClient:
    """Async client for the benchmark engine's HTTP API."""

    def __init__(
        self,
        base_url: str,
        run_timeout: float = DEFAULT_RUN_TIMEOUT,
        history_timeout: float = DEFAULT_HISTORY_TIMEOUT,
        run_path: str = DEFAULT_RUN_PATH,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize engine client.

        Args:
            base_url: Root URL of the engine, e.g. ``http://localhost:8080``
            run_timeout: Seconds to wait for a load test to finish
            history_timeout: Seconds to wait for history lookups
            run_path: Path of the run endpoint
            transport: Optional httpx transport (used to stub the engine)
        """
        self.base_url = base_url.rstrip("/")
        self.run_timeout = run_timeout
        self.history_timeout = history_timeout
        self.run_path = run_path
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"accept": "application/json"},
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        timeout: float,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                headers=headers,
                timeout=httpx.Timeout(timeout, connect=min(timeout, DEFAULT_CONNECT_TIMEOUT)),
            )
        except httpx.ConnectTimeout as e:
            logger.error(f"Cannot reach benchmark API at {self.base_url}: connect timed out")
            raise EngineUnreachableError() from e
        except httpx.TimeoutException as e:
            logger.error(f"Benchmark API {method} {path} timed out after {timeout:g}s")
            raise EngineTimeoutError(timeout) from e
        except httpx.TransportError as e:
            logger.error(f"Cannot reach benchmark API at {self.base_url}: {e}")
            raise EngineUnreachableError() from e

        logger.info(f"Benchmark API {method} {path} -> {response.status_code}")
        return response

    @staticmethod
    def _json_body(response: httpx.Response) -> Any:
        if not response.content.strip():
            raise EngineResponseInvalidError("Benchmark API returned empty response")
        try:
            return response.json()
        except ValueError as e:
            raise EngineResponseInvalidError("Benchmark API returned a non-JSON response") from e

    async def run_load_test(self, config: BenchmarkConfig) -> Any:
        """
        Ask the engine to run one load test and wait for its results.

        Returns:
            The decoded JSON body, not yet validated

        Raises:
            EngineUnreachableError, EngineTimeoutError, EngineRejectedError,
            EngineResponseInvalidError
        """
        headers = {}
        if config.api_key is not None:
            headers["Authorization"] = f"Bearer {config.api_key.get_secret_value()}"

        params = config.engine_params()
        logger.info(
            f"Dispatching load test: url={config.url} users={config.user} "
            f"spawnrate={config.spawnrate} duration={config.duration}s "
            f"dataset={config.dataset} model={config.model or '-'}"
        )
        response = await self._request(
            "POST", self.run_path, self.run_timeout, params=params, headers=headers
        )
        if response.is_error:
            raise EngineRejectedError(response.status_code, _engine_message(response))
        return self._json_body(response)

    async def list_benchmarks(self) -> List[Dict[str, Any]]:
        """Fetch the engine's own benchmark history (raw records)."""
        response = await self._request("GET", "/benchmarks", self.history_timeout)
        if response.is_error:
            raise EngineRejectedError(response.status_code, _engine_message(response))
        body = self._json_body(response)
        if isinstance(body, dict) and isinstance(body.get("results"), list):
            return body["results"]
        if isinstance(body, list):
            return body
        raise EngineResponseInvalidError("Benchmark API history is not a list of records")

    async def get_benchmark(self, benchmark_id: int) -> Dict[str, Any]:
        """Fetch one record from the engine's history (raw record)."""
        response = await self._request("GET", f"/benchmarks/{benchmark_id}", self.history_timeout)
        if response.status_code == 404:
            raise BenchmarkNotFoundError(benchmark_id)
        if response.is_error:
            raise EngineRejectedError(response.status_code, _engine_message(response))
        body = self._json_body(response)
        if not isinstance(body, dict):
            raise EngineResponseInvalidError("Benchmark API record is not an object")
        return body

    async def ping(self) -> Dict[str, Any]:
        """
        Check that the engine answers at all.

        Any response below 500 counts as reachable; transport failures raise.
        """
        response = await self._request("GET", "/", self.history_timeout)
        return {
            "status": "available" if response.status_code < 500 else "unavailable",
            "status_code": response.status_code,
            "engine_url": self.base_url,
        }

    async def aclose(self) -> None:
        await self._client.aclose()
