"""Tests for BaseAPIClient status mapping, retries and circuit breaking."""

from __future__ import annotations

import json
import time
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from legal_search.infrastructure.sources.base_client import BaseAPIClient
from legal_search.shared.async_utils import BreakerState, CircuitBreaker
from legal_search.shared.exceptions import (
    AdapterBlockedError,
    AdapterNetworkError,
    AdapterRateLimitedError,
    AdapterTimeoutError,
    AdapterUnauthorizedError,
    CircuitOpenError,
)


class DemoClient(BaseAPIClient):
    _service_name = "Demo"
    _source_id = "demo"


class ScrapedClient(DemoClient):
    _forbidden_means_blocked = True


def make_client(handler, cls=DemoClient, **kwargs) -> BaseAPIClient:
    return cls(base_url="https://api.example.test", transport=httpx.MockTransport(handler), **kwargs)


# =============================================================================
# Successful requests
# =============================================================================


class TestRequests:
    async def test_json_body(self, mock_http):
        handler, transport = mock_http(json={"ok": True})
        client = DemoClient(base_url="https://api.example.test/", transport=transport)

        assert await client._make_request("/items", params={"q": "x"}) == {"ok": True}
        assert str(handler.last.url) == "https://api.example.test/items?q=x"

    async def test_empty_params_are_dropped(self, mock_http):
        handler, transport = mock_http(json=[])
        client = DemoClient(base_url="https://api.example.test", transport=transport)

        await client._make_request("/items", params={"q": "x", "court": None, "blank": ""})

        assert dict(handler.last.url.params) == {"q": "x"}

    async def test_text_body(self, mock_http):
        _, transport = mock_http(text="<html></html>")
        client = DemoClient(base_url="https://api.example.test", transport=transport)

        assert await client._make_request("/", expect_json=False) == "<html></html>"

    async def test_post_sends_json(self, mock_http):
        handler, transport = mock_http(json={})
        client = DemoClient(base_url="https://api.example.test", transport=transport)

        await client._make_request("/search", method="POST", data={"query": "x"})

        assert handler.last.method == "POST"
        assert json.loads(handler.last.content) == {"query": "x"}

    async def test_full_url_bypasses_base(self, mock_http):
        handler, transport = mock_http(json={})
        client = DemoClient(base_url="https://api.example.test", transport=transport)

        await client._make_request("https://other.example.test/x")

        assert handler.last.url.host == "other.example.test"

    async def test_min_interval_spaces_requests(self, mock_http):
        _, transport = mock_http(json={})
        client = DemoClient(base_url="https://api.example.test", transport=transport, min_interval=0.05)

        start = time.monotonic()
        await client._make_request("/a")
        await client._make_request("/b")

        assert time.monotonic() - start >= 0.04

    async def test_context_manager_closes(self, mock_http):
        _, transport = mock_http(json={})
        async with DemoClient(transport=transport) as client:
            pass
        assert client._client.is_closed


# =============================================================================
# Status mapping
# =============================================================================


class TestStatusMapping:
    async def test_401_is_unauthorized(self, mock_http):
        _, transport = mock_http(status_code=401)
        client = DemoClient(transport=transport)

        with pytest.raises(AdapterUnauthorizedError) as exc_info:
            await client._make_request("https://api.example.test/x")
        assert exc_info.value.source_id == "demo"

    async def test_403_is_unauthorized_for_apis(self, mock_http):
        _, transport = mock_http(status_code=403)
        client = DemoClient(transport=transport)

        with pytest.raises(AdapterUnauthorizedError):
            await client._make_request("https://api.example.test/x")

    async def test_403_is_blocked_for_scraped_sites(self, mock_http):
        _, transport = mock_http(status_code=403, text="Forbidden")
        client = ScrapedClient(transport=transport)

        with pytest.raises(AdapterBlockedError):
            await client._make_request("https://api.example.test/x", expect_json=False)

    async def test_429_surfaces_retry_after(self, mock_http):
        _, transport = mock_http(status_code=429, headers={"Retry-After": "7"})
        client = DemoClient(transport=transport)

        with pytest.raises(AdapterRateLimitedError) as exc_info:
            await client._make_request("https://api.example.test/x")
        assert exc_info.value.retry_after == 7.0

    async def test_429_without_header(self, mock_http):
        _, transport = mock_http(status_code=429)
        client = DemoClient(transport=transport)

        with pytest.raises(AdapterRateLimitedError) as exc_info:
            await client._make_request("https://api.example.test/x")
        assert exc_info.value.retry_after is None

    async def test_500_is_network_error(self, mock_http):
        handler, transport = mock_http(status_code=500)
        client = DemoClient(transport=transport)

        with pytest.raises(AdapterNetworkError) as exc_info:
            await client._make_request("https://api.example.test/x")
        assert exc_info.value.status_code == 500
        # HTTP statuses are never retried
        assert len(handler.requests) == 1

    async def test_invalid_json_is_network_error(self, mock_http):
        _, transport = mock_http(text="not json")
        client = DemoClient(transport=transport)

        with pytest.raises(AdapterNetworkError, match="invalid JSON"):
            await client._make_request("https://api.example.test/x")


# =============================================================================
# Transport failures
# =============================================================================


class TestTransportFailures:
    async def test_timeout(self, mock_http):
        _, transport = mock_http(exc=httpx.ReadTimeout("slow"))
        client = DemoClient(transport=transport)

        with pytest.raises(AdapterTimeoutError):
            await client._make_request("https://api.example.test/x")

    async def test_connect_error_retried_then_raised(self, mock_http):
        handler, transport = mock_http(exc=httpx.ConnectError("refused"))
        client = DemoClient(transport=transport, max_retries=2)

        with patch("legal_search.infrastructure.sources.base_client.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(AdapterNetworkError, match="refused"):
                await client._make_request("https://api.example.test/x")

        assert len(handler.requests) == 3

    async def test_recovers_on_retry(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("flaky")
            return httpx.Response(200, json={"ok": 1})

        client = make_client(handler)

        with patch("legal_search.infrastructure.sources.base_client.asyncio.sleep", new=AsyncMock()):
            assert await client._make_request("/x") == {"ok": 1}
        assert len(calls) == 2

    async def test_open_circuit_rejects_without_request(self, mock_http):
        handler, transport = mock_http(status_code=500)
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60, name="Demo")
        client = DemoClient(transport=transport, circuit_breaker=breaker)

        with pytest.raises(AdapterNetworkError):
            await client._make_request("https://api.example.test/x")
        with pytest.raises(CircuitOpenError):
            await client._make_request("https://api.example.test/x")

        assert len(handler.requests) == 1

    @pytest.mark.parametrize(
        ("cls", "status", "error"),
        [
            (ScrapedClient, 403, AdapterBlockedError),
            (DemoClient, 401, AdapterUnauthorizedError),
            (DemoClient, 429, AdapterRateLimitedError),
        ],
    )
    async def test_4xx_answers_do_not_trip_circuit(self, mock_http, cls, status, error):
        handler, transport = mock_http(status_code=status, text="no")
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60, name="Demo")
        client = cls(transport=transport, circuit_breaker=breaker)

        for _ in range(3):
            with pytest.raises(error):
                await client._make_request("https://api.example.test/x", expect_json=False)

        assert breaker.state is BreakerState.CLOSED
        assert len(handler.requests) == 3
