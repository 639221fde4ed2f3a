"""Protected async client for the GBIF REST API.

Every request funnels through the same stack, in order:

1. Circuit breaker gate (fail fast with CircuitOpenError while OPEN)
2. Cache lookup (GET only)
3. Concurrency queue admission (FIFO, bounded in-flight requests)
4. Rate limiter wait (per-minute window plus 429 backoff)
5. HTTP attempt, classified into Success / Retry / Fail; a Retry sleeps its
   delay and repeats this step without taking a new rate-limit slot
6. Breaker outcome recording, then cache store (GET only)

Truncation is not applied here; callers shape payloads with
``ResponseTruncator`` after receiving them.

Example:
    async with GbifClient(config) as client:
        species = await client.get("/species/search", {"q": "Puma"})
        async for page in client.paginate("/occurrence/search", {"taxonKey": 2435099}):
            ...
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Mapping, Optional

import httpx

from gbif_mcp.core.cache import ResponseCache, make_cache_key
from gbif_mcp.core.concurrency import ConcurrencyLimiter
from gbif_mcp.core.errors import DECODE_ERROR, HTTP_ERROR, CircuitOpenError, UpstreamError
from gbif_mcp.core.observability import audit_log
from gbif_mcp.core.resilience import (
    CircuitBreaker,
    CircuitState,
    Clock,
    Fail,
    Outcome,
    RequestRateLimiter,
    RetryClassifier,
    SleepFunc,
    Success,
)

if TYPE_CHECKING:
    from gbif_mcp.config import ServerConfig

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class GbifClient:
    """One protected connection to a GBIF API root.

    All resilience state (breaker, rate-limit window, cache, queue) lives on
    the instance; create one client per configured upstream and share it.

    Attributes:
        config: Configuration snapshot the client was built from
        breaker: Circuit breaker guarding the upstream
        rate_limiter: Per-minute limiter with 429 backoff
        cache: Byte-bounded LRU cache for GET responses
        queue: Concurrency limiter for in-flight requests
        classifier: Maps failed attempts to Retry or Fail
    """

    def __init__(
        self,
        config: "ServerConfig",
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
        sleep_func: Optional[SleepFunc] = None,
    ):
        self.config = config
        self._clock = clock or time.monotonic
        self._sleep = sleep_func or asyncio.sleep
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

        self.breaker = CircuitBreaker("gbif", clock=self._clock)
        self.rate_limiter = RequestRateLimiter(
            config.rate_limit.max_requests_per_minute,
            backoff_multiplier=config.rate_limit.backoff_multiplier,
            max_backoff_time=config.rate_limit.max_backoff_time,
            initial_backoff=config.gbif.retry_delay,
            clock=self._clock,
            sleep_func=self._sleep,
        )
        self.cache = ResponseCache(
            config.cache.max_size_bytes,
            config.cache.ttl,
            clock=self._clock,
        )
        self.queue = ConcurrencyLimiter(config.rate_limit.max_concurrent_requests, name="gbif")
        self.classifier = RetryClassifier(
            self.rate_limiter,
            retry_attempts=config.gbif.retry_attempts,
            retry_delay=config.gbif.retry_delay,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def http(self) -> httpx.AsyncClient:
        """The underlying httpx client, created on first use."""
        if self._http is None:
            gbif = self.config.gbif
            auth = httpx.BasicAuth(gbif.username, gbif.password) if gbif.has_credentials else None
            self._http = httpx.AsyncClient(
                base_url=gbif.base_url.rstrip("/"),
                timeout=gbif.timeout,
                headers={"User-Agent": gbif.user_agent, "Accept": "application/json"},
                auth=auth,
                transport=self._transport,
            )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "GbifClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Request surface
    # ------------------------------------------------------------------

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` and return the decoded JSON body (cached)."""
        return await self._request("GET", path, params=params)

    async def post(
        self,
        path: str,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """POST a JSON ``body`` to ``path`` and return the decoded response."""
        return await self._request("POST", path, params=params, json_body=body)

    async def delete(self, path: str, params: Optional[Mapping[str, Any]] = None) -> None:
        await self._request("DELETE", path, params=params)

    async def download(self, url: str) -> bytes:
        """Fetch raw bytes from ``url`` with a doubled timeout, bypassing the cache."""
        return await self._request(
            "GET",
            url,
            raw=True,
            timeout=self.config.gbif.timeout * 2,
        )

    async def paginate(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> AsyncIterator[List[Any]]:
        """Yield successive ``results`` pages of an offset/limit endpoint.

        Stops at ``endOfRecords`` or an empty page. Each call starts again
        from offset 0.
        """
        offset = 0
        while True:
            page = await self.get(path, {**(params or {}), "offset": offset, "limit": page_size})
            results = (page.get("results") or []) if isinstance(page, dict) else []
            if not results:
                return
            yield results
            if page.get("endOfRecords"):
                return
            offset += page_size

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def circuit_state(self) -> str:
        return self.breaker.current_state().value

    def cache_stats(self) -> Dict[str, int]:
        return self.cache.stats()

    def clear_cache(self) -> None:
        entries = len(self.cache)
        self.cache.clear()
        audit_log("cache_cleared", entries=entries)

    def reset_circuit_breaker(self) -> None:
        self.breaker.reset()

    def reset(self) -> None:
        """Clear the cache and close the breaker."""
        self.clear_cache()
        self.reset_circuit_breaker()

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of breaker, cache, rate limiter and queue state."""
        breaker = self.breaker.status()
        return {
            "circuit": {
                "state": breaker.state,
                "consecutive_failures": breaker.consecutive_failures,
                "retry_after": breaker.retry_after,
            },
            "cache": {**self.cache_stats(), "enabled": self.config.caching_enabled},
            "rate_limit": self.rate_limiter.get_stats(),
            "queue": self.queue.get_stats(),
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json_body: Any = None,
        raw: bool = False,
        timeout: Optional[float] = None,
    ) -> Any:
        if not self.breaker.can_request():
            retry_after = self.breaker.retry_after()
            audit_log(
                "circuit_rejected",
                level=logging.WARNING,
                breaker=self.breaker.name,
                method=method,
                path=path,
            )
            raise CircuitOpenError(
                "Circuit breaker is OPEN - GBIF service temporarily unavailable",
                breaker_name=self.breaker.name,
                state=self.breaker.state,
                retry_after=retry_after,
            )

        cache_key: Optional[str] = None
        if method == "GET" and not raw and self.config.caching_enabled:
            cache_key = make_cache_key(method, path, params)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit", extra={"path": path})
                return cached

        async with self.queue.acquire():
            payload = await self._execute(method, path, params, json_body, raw, timeout)

        if cache_key is not None and payload is not None:
            self.cache.set(cache_key, payload)
        return payload

    async def _execute(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]],
        json_body: Any,
        raw: bool,
        timeout: Optional[float],
    ) -> Any:
        """Attempt loop for one logical request.

        The request takes a single rate-limit slot; retries reuse it and
        only wait out their own classified delay.
        """
        server_error_retries = 0
        attempt = 0

        await self.rate_limiter.acquire()
        while True:
            attempt += 1
            logger.debug(
                "GBIF request",
                extra={"method": method, "path": path, "params": dict(params or {}), "attempt": attempt},
            )

            outcome = await self._attempt(method, path, params, json_body, raw, timeout, server_error_retries)

            if isinstance(outcome, Success):
                self.breaker.record_success()
                self.rate_limiter.record_success()
                return outcome.payload

            self.breaker.record_failure()

            if isinstance(outcome, Fail):
                logger.error(
                    "GBIF request failed",
                    extra={"method": method, "path": path, "error": outcome.error.to_dict()},
                )
                raise outcome.error

            if self.breaker.state == CircuitState.OPEN:
                raise UpstreamError(
                    HTTP_ERROR,
                    outcome.message or f"HTTP {outcome.status_code}",
                    outcome.status_code,
                )

            if outcome.reason == "server_error":
                server_error_retries += 1

            audit_log(
                "retry_attempt",
                method=method,
                path=path,
                attempt=attempt,
                status_code=outcome.status_code,
                reason=outcome.reason,
                delay_ms=int(outcome.delay * 1000),
            )
            await self._sleep(outcome.delay)

    async def _attempt(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]],
        json_body: Any,
        raw: bool,
        timeout: Optional[float],
        server_error_retries: int,
    ) -> Outcome:
        request_kwargs: Dict[str, Any] = {"params": _clean_params(params)}
        if json_body is not None:
            request_kwargs["json"] = json_body
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        try:
            response = await self.http.request(method, path, **request_kwargs)
        except httpx.TransportError as e:
            return self.classifier.classify_transport_error(e)

        if not response.is_success:
            return self.classifier.classify_response(response, server_error_retries)

        if raw:
            return Success(response.content)
        if method == "DELETE" or not response.content:
            return Success(None)
        try:
            return Success(response.json())
        except ValueError:
            return Fail(
                UpstreamError(
                    DECODE_ERROR,
                    f"GBIF returned a non-JSON body for {path}",
                    response.status_code,
                )
            )


def _clean_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop ``None`` values and render booleans the way GBIF expects."""
    cleaned: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            cleaned[key] = ["true" if v is True else "false" if v is False else v for v in value]
        else:
            cleaned[key] = value
    return cleaned

