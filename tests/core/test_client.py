"""Tests for GbifClient request orchestration against a mock transport."""

import base64
import json

import httpx
import pytest

from gbif_mcp.core.client import GbifClient
from gbif_mcp.core.errors import DECODE_ERROR, NETWORK_ERROR, CircuitOpenError, UpstreamError
from gbif_mcp.core.resilience import CircuitState


class Upstream:
    """Scripted fake GBIF: replays queued responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


def _client(config, clock, upstream):
    return GbifClient(
        config,
        transport=httpx.MockTransport(upstream),
        clock=clock,
        sleep_func=clock.sleep,
    )


def _json(status=200, body=None, **kwargs):
    return httpx.Response(status, json=body if body is not None else {}, **kwargs)


class TestSuccessfulRequests:
    """Tests for the happy path."""

    @pytest.mark.asyncio
    async def test_get_returns_json(self, config, clock):
        upstream = Upstream(_json(body={"key": 2435099, "scientificName": "Puma concolor"}))
        async with _client(config, clock, upstream) as client:
            result = await client.get("/species/2435099")

        assert result["scientificName"] == "Puma concolor"
        assert str(upstream.requests[0].url) == "https://api.gbif.test/v1/species/2435099"

    @pytest.mark.asyncio
    async def test_sends_user_agent_and_accept(self, config, clock):
        upstream = Upstream(_json())
        async with _client(config, clock, upstream) as client:
            await client.get("/species/1")

        headers = upstream.requests[0].headers
        assert headers["User-Agent"] == "GBIF-MCP-Server/1.0.0"
        assert headers["Accept"] == "application/json"
        assert "Authorization" not in headers

    @pytest.mark.asyncio
    async def test_basic_auth_when_credentials_set(self, config, clock):
        config.gbif.username = "ana"
        config.gbif.password = "hunter2"
        upstream = Upstream(_json())
        async with _client(config, clock, upstream) as client:
            await client.get("/occurrence/download/user/ana")

        expected = base64.b64encode(b"ana:hunter2").decode()
        assert upstream.requests[0].headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_params_are_encoded(self, config, clock):
        upstream = Upstream(_json(body={"results": []}))
        async with _client(config, clock, upstream) as client:
            await client.get("/occurrence/search", {"taxonKey": 5, "hasCoordinate": True, "country": None})

        query = upstream.requests[0].url.params
        assert query["taxonKey"] == "5"
        assert query["hasCoordinate"] == "true"
        assert "country" not in query

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self, config, clock):
        upstream = Upstream(_json(201, {"ok": True}))
        async with _client(config, clock, upstream) as client:
            result = await client.post("/validation", {"format": "DWCA"})

        assert result == {"ok": True}
        assert json.loads(upstream.requests[0].content) == {"format": "DWCA"}

    @pytest.mark.asyncio
    async def test_delete_returns_none(self, config, clock):
        upstream = Upstream(httpx.Response(204))
        async with _client(config, clock, upstream) as client:
            assert await client.delete("/occurrence/download/request/0001") is None
        assert upstream.requests[0].method == "DELETE"

    @pytest.mark.asyncio
    async def test_download_returns_bytes_uncached(self, config, clock):
        upstream = Upstream(httpx.Response(200, content=b"PK\x03\x04zip"))
        async with _client(config, clock, upstream) as client:
            first = await client.download("https://download.gbif.test/0001.zip")
            await client.download("https://download.gbif.test/0001.zip")

        assert first == b"PK\x03\x04zip"
        assert len(upstream.requests) == 2
        assert client.cache_stats()["entry_count"] == 0
        assert upstream.requests[0].url.host == "download.gbif.test"


class TestRetries:
    """Tests for retry classification inside the request loop."""

    @pytest.mark.asyncio
    async def test_persistent_500_makes_four_attempts(self, config, clock):
        """Five scripted 500s with retry_attempts=3 yield 1 + 3 attempts."""
        upstream = Upstream(*[_json(500, {"message": "boom"}) for _ in range(5)])
        client = _client(config, clock, upstream)

        with pytest.raises(UpstreamError) as exc_info:
            await client.get("/species/search")

        assert exc_info.value.status_code == 500
        assert len(upstream.requests) == 4
        assert clock.sleeps == [1.0, 2.0, 4.0]
        # Every failed attempt counts toward the breaker
        assert client.breaker.consecutive_failures == 4
        assert client.circuit_state() == "CLOSED"

    @pytest.mark.asyncio
    async def test_500_then_success(self, config, clock):
        upstream = Upstream(_json(503), _json(body={"count": 1}))
        client = _client(config, clock, upstream)

        assert await client.get("/occurrence/count") == {"count": 1}
        assert len(upstream.requests) == 2
        assert client.breaker.consecutive_failures == 0

    @pytest.mark.asyncio
    async def test_retry_reuses_rate_limit_slot(self, config, clock):
        """A retried request counts once against the per-minute window."""
        config.rate_limit.max_requests_per_minute = 1
        upstream = Upstream(_json(503), _json(body={"count": 1}))
        client = _client(config, clock, upstream)

        assert await client.get("/occurrence/count") == {"count": 1}
        assert len(upstream.requests) == 2
        assert clock.sleeps == [1.0]
        assert client.rate_limiter.request_count == 1

    @pytest.mark.asyncio
    async def test_429_with_retry_after_retries_once(self, config, clock):
        """Retry-After: 2 delays exactly one retry by at least two seconds."""
        upstream = Upstream(
            httpx.Response(429, headers={"Retry-After": "2"}),
            _json(body={"results": []}),
        )
        client = _client(config, clock, upstream)
        start = clock()

        result = await client.get("/occurrence/search")

        assert result == {"results": []}
        assert len(upstream.requests) == 2
        assert sum(clock.sleeps) >= 2.0
        assert clock() - start >= 2.0

    @pytest.mark.asyncio
    async def test_breaker_opening_stops_retries(self, config, clock):
        """With a generous retry budget the loop stops once the breaker opens."""
        config.gbif.retry_attempts = 10
        upstream = Upstream(_json(502))
        client = _client(config, clock, upstream)

        with pytest.raises(UpstreamError) as exc_info:
            await client.get("/species/search")

        assert exc_info.value.status_code == 502
        assert len(upstream.requests) == 5
        assert client.breaker.current_state() == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_404_is_terminal(self, config, clock):
        upstream = Upstream(_json(404, {"message": "Not found"}))
        client = _client(config, clock, upstream)

        with pytest.raises(UpstreamError) as exc_info:
            await client.get("/species/0")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Not found"
        assert len(upstream.requests) == 1
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_transport_error(self, config, clock):
        upstream = Upstream(httpx.ConnectError("connection refused"))
        client = _client(config, clock, upstream)

        with pytest.raises(UpstreamError) as exc_info:
            await client.get("/species/1")

        assert exc_info.value.code == NETWORK_ERROR
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_non_json_body(self, config, clock):
        upstream = Upstream(httpx.Response(200, text="<html>maintenance</html>"))
        client = _client(config, clock, upstream)

        with pytest.raises(UpstreamError) as exc_info:
            await client.get("/species/1")

        assert exc_info.value.code == DECODE_ERROR


class TestCircuitGate:
    """Tests for breaker rejection."""

    @pytest.mark.asyncio
    async def test_open_circuit_rejects_without_calling(self, config, clock):
        upstream = Upstream(_json())
        client = _client(config, clock, upstream)
        for _ in range(5):
            client.breaker.record_failure()
        clock.advance(10.0)

        with pytest.raises(CircuitOpenError) as exc_info:
            await client.get("/species/1")

        assert exc_info.value.retry_after == pytest.approx(50.0)
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_half_open_trials_close_circuit(self, config, clock):
        upstream = Upstream(_json(body={"ok": 1}), _json(body={"ok": 2}))
        client = _client(config, clock, upstream)
        for _ in range(5):
            client.breaker.record_failure()
        clock.advance(60.0)

        await client.get("/a")
        assert client.circuit_state() == "HALF_OPEN"
        await client.get("/b")
        assert client.circuit_state() == "CLOSED"

    @pytest.mark.asyncio
    async def test_reset_circuit_breaker(self, config, clock):
        client = _client(config, clock, Upstream(_json()))
        for _ in range(5):
            client.breaker.record_failure()
        client.reset_circuit_breaker()
        assert client.circuit_state() == "CLOSED"


class TestCaching:
    """Tests for GET response caching."""

    @pytest.mark.asyncio
    async def test_repeat_get_served_from_cache(self, config, clock):
        upstream = Upstream(_json(body={"results": [1]}))
        client = _client(config, clock, upstream)

        first = await client.get("/species/search", {"q": "Puma", "limit": 5})
        second = await client.get("/species/search", {"limit": 5, "q": "Puma"})

        assert first == second
        assert len(upstream.requests) == 1
        assert client.cache_stats()["entry_count"] == 1

    @pytest.mark.asyncio
    async def test_expired_entry_refetched(self, config, clock):
        config.cache.ttl = 10.0
        upstream = Upstream(_json(body={"v": 1}))
        client = _client(config, clock, upstream)

        await client.get("/species/1")
        clock.advance(10.0)
        await client.get("/species/1")

        assert len(upstream.requests) == 2

    @pytest.mark.asyncio
    async def test_caching_disabled_by_feature_flag(self, config, clock):
        config.features.enable_caching = False
        upstream = Upstream(_json(body={"v": 1}))
        client = _client(config, clock, upstream)

        await client.get("/species/1")
        await client.get("/species/1")

        assert len(upstream.requests) == 2
        assert client.cache_stats()["entry_count"] == 0

    @pytest.mark.asyncio
    async def test_post_not_cached(self, config, clock):
        upstream = Upstream(_json(body={"v": 1}))
        client = _client(config, clock, upstream)

        await client.post("/x", {"a": 1})
        await client.post("/x", {"a": 1})

        assert len(upstream.requests) == 2

    @pytest.mark.asyncio
    async def test_reset_clears_cache_and_breaker(self, config, clock):
        client = _client(config, clock, Upstream(_json(body={"v": 1})))
        await client.get("/species/1")
        for _ in range(5):
            client.breaker.record_failure()

        client.reset()

        assert client.cache_stats()["entry_count"] == 0
        assert client.circuit_state() == "CLOSED"


class TestPaginate:
    """Tests for lazy offset pagination."""

    @pytest.mark.asyncio
    async def test_pages_until_end_of_records(self, config, clock):
        upstream = Upstream(
            _json(body={"results": [1, 2], "endOfRecords": False}),
            _json(body={"results": [3, 4], "endOfRecords": False}),
            _json(body={"results": [5], "endOfRecords": True}),
        )
        client = _client(config, clock, upstream)

        pages = [page async for page in client.paginate("/occurrence/search", {"taxonKey": 1}, page_size=2)]

        assert pages == [[1, 2], [3, 4], [5]]
        offsets = [r.url.params["offset"] for r in upstream.requests]
        assert offsets == ["0", "2", "4"]
        assert all(r.url.params["limit"] == "2" for r in upstream.requests)

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self, config, clock):
        upstream = Upstream(
            _json(body={"results": [1], "endOfRecords": False}),
            _json(body={"results": []}),
        )
        client = _client(config, clock, upstream)

        pages = [page async for page in client.paginate("/x", page_size=1)]

        assert pages == [[1]]
        assert len(upstream.requests) == 2


class TestStatus:
    @pytest.mark.asyncio
    async def test_status_snapshot(self, config, clock):
        client = _client(config, clock, Upstream(_json(body={"v": 1})))
        await client.get("/species/1")

        status = client.get_status()

        assert status["circuit"]["state"] == "CLOSED"
        assert status["cache"]["entry_count"] == 1
        assert status["cache"]["enabled"] is True
        assert status["rate_limit"]["requests_in_window"] == 1
        assert status["queue"]["total_processed"] == 1
