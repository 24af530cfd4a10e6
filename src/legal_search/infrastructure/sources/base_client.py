"""
HTTP plumbing shared by every legal source adapter.

One httpx.AsyncClient per provider, with:
- request spacing (scrapers set a minimum interval)
- a retry with exponential backoff for transport errors only
- a per-provider CircuitBreaker
- HTTP status -> AdapterError mapping

Errors are raised, never turned into empty results: the aggregator
reports *why* a source produced nothing.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from typing_extensions import Self

from legal_search.shared.async_utils import CircuitBreaker
from legal_search.shared.exceptions import (
    AdapterBlockedError,
    AdapterNetworkError,
    AdapterRateLimitedError,
    AdapterTimeoutError,
    AdapterUnauthorizedError,
)

logger = logging.getLogger(__name__)

_POOL_LIMITS = httpx.Limits(max_connections=20, max_keepalive_connections=10, keepalive_expiry=30.0)


class BaseAPIClient:
    """
    Provider-agnostic HTTP client.

    Subclasses name themselves through `_service_name` / `_source_id` and
    call `_make_request()`; they may override `_parse_response()` or
    `_raise_for_status()` (CourtListener does, for its 429 body).

    Example:
        class CourtListenerClient(BaseAPIClient):
            _service_name = "CourtListener"
            _source_id = "court_listener"

        client = CourtListenerClient(base_url="https://www.courtlistener.com/api/rest/v4")
        page = await client._make_request("/search/", params={"q": "miranda"})
    """

    _service_name: str = "API"
    _source_id: str | None = None
    # 403 means "bot wall" for scraped sites and "bad key" for keyed APIs
    _forbidden_means_blocked: bool = False

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        min_interval: float = 0.0,
        headers: dict[str, str] | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        max_retries: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Prefix for relative paths; absolute URLs bypass it
            timeout: httpx timeout per request, seconds
            min_interval: Seconds to keep between two requests
            headers: Sent with every request
            circuit_breaker: Defaults to 10 failures / 60s recovery
            max_retries: Extra attempts after a transport error; HTTP
                error statuses are never retried
            transport: httpx transport override (MockTransport in tests)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._min_interval = min_interval
        self._max_retries = max_retries
        self._next_slot = 0.0
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=headers or {},
            follow_redirects=True,
            transport=transport,
            limits=_POOL_LIMITS,
        )
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=10,
            recovery_timeout=60.0,
            name=self._service_name,
            source_id=self._source_id,
        )

    async def _rate_limit(self) -> None:
        now = time.monotonic()
        if now < self._next_slot:
            await asyncio.sleep(self._next_slot - now)
        self._next_slot = max(now, self._next_slot) + self._min_interval

    def _build_url(self, url: str) -> str:
        return url if "://" in url else self._base_url + url

    async def _make_request(
        self,
        url: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Send one request through the spacing, circuit and retry layers.

        `params` entries that are None or "" are left out of the query
        string; `data` is sent as a JSON body on POST. Returns decoded
        JSON, or the body text when `expect_json` is False.

        Raises:
            AdapterUnauthorizedError: 401, or 403 on keyed APIs
            AdapterBlockedError: 403 on scraped sites
            AdapterRateLimitedError: 429 (Retry-After surfaced)
            AdapterNetworkError: transport failure, other non-2xx, bad body,
                or open circuit breaker
            AdapterTimeoutError: request exceeded the client timeout
        """
        target = self._build_url(url)
        query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}

        attempt = 0
        while True:
            await self._rate_limit()
            try:
                async with self._circuit_breaker:
                    response = await self._execute_request(
                        target, method=method, params=query, data=data, headers=headers
                    )
                    if response.status_code < 400:
                        return self._parse_response(response, expect_json)
                    # only outages count against the breaker; a 4xx answer
                    # (bot wall, bad key, 429) keeps its own failure kind
                    if response.status_code >= 500:
                        self._raise_for_status(response)
                self._raise_for_status(response)
            except httpx.TimeoutException as e:
                logger.warning(f"{self._service_name} request timed out: {e!r}")
                raise AdapterTimeoutError(
                    f"{self._service_name} request timed out after {self._timeout:g}s",
                    source_id=self._source_id,
                ) from e
            except httpx.RequestError as e:
                if attempt >= self._max_retries:
                    logger.warning(f"{self._service_name} request failed: {e}")
                    raise AdapterNetworkError(
                        f"{self._service_name} request failed: {e}",
                        source_id=self._source_id,
                    ) from e
                logger.warning(f"{self._service_name} request error (attempt {attempt + 1}), retrying: {e}")
                await asyncio.sleep(2 ** attempt)
                attempt += 1

    async def _execute_request(
        self,
        url: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        if method == "POST":
            return await self._client.post(url, params=params, json=data, headers=headers or {})
        return await self._client.get(url, params=params, headers=headers or {})

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Map an HTTP error status to the adapter error taxonomy."""
        status = response.status_code
        if status < 400:
            return

        if status == 429:
            retry_after = self._get_retry_after(response)
            logger.warning(f"{self._service_name}: rate limited (429), retry after {retry_after}")
            raise AdapterRateLimitedError(
                f"{self._service_name} rate limit exceeded",
                retry_after=retry_after,
                source_id=self._source_id,
            )
        if status == 403 and self._forbidden_means_blocked:
            raise AdapterBlockedError(
                f"{self._service_name} blocked the request (403)",
                source_id=self._source_id,
            )
        if status in (401, 403):
            raise AdapterUnauthorizedError(
                f"{self._service_name} rejected credentials ({status})",
                source_id=self._source_id,
            )
        raise AdapterNetworkError(
            f"{self._service_name} HTTP error {status}: {response.reason_phrase}",
            status_code=status,
            source_id=self._source_id,
        )

    def _parse_response(self, response: httpx.Response, expect_json: bool) -> Any:
        if not expect_json:
            return response.text
        try:
            return response.json()
        except ValueError as e:
            raise AdapterNetworkError(
                f"{self._service_name} returned an invalid JSON body",
                source_id=self._source_id,
            ) from e

    @staticmethod
    def _get_retry_after(response: httpx.Response) -> float | None:
        """Retry-After in seconds; HTTP-date values are ignored."""
        try:
            return float(response.headers["Retry-After"])
        except (KeyError, ValueError):
            return None

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
