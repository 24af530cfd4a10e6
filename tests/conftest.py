"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from legal_search.domain.entities import AccessType, SearchOptions, SourceDescriptor
from legal_search.infrastructure.sources import LegalSourceAdapter

# ============================================================
# Fake Adapter
# ============================================================


class FakeAdapter(LegalSourceAdapter):
    """In-memory adapter: returns canned records or raises a canned error."""

    descriptor = SourceDescriptor(
        id="fake",
        name="Fake",
        access_type=AccessType.FREE,
        base_url="https://fake.invalid",
    )

    def __init__(
        self,
        source_id: str,
        name: str | None = None,
        *,
        records: list[dict[str, Any]] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        probe_error: Exception | None = None,
        probe_delay: float = 0.0,
        active: bool = True,
        api_key: str | None = None,
    ) -> None:
        super().__init__(
            api_key,
            descriptor=SourceDescriptor(
                id=source_id,
                name=name or source_id.replace("_", " ").title(),
                access_type=AccessType.FREE,
                base_url="https://fake.invalid",
                is_active=active,
            ),
        )
        self.records = records or []
        self.error = error
        self.delay = delay
        self.probe_error = probe_error
        self.probe_delay = probe_delay
        self.calls: list[tuple[str, SearchOptions]] = []
        self.probes = 0
        self.closed = False

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        self.calls.append((query, options))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        return raw

    async def _probe(self) -> None:
        self.probes += 1
        if self.probe_delay:
            await asyncio.sleep(self.probe_delay)
        if self.probe_error is not None:
            raise self.probe_error

    async def close(self) -> None:
        self.closed = True
        await super().close()


def make_records(prefix: str, titles: list[str]) -> list[dict[str, Any]]:
    """Raw records with ids `<prefix>-<n>` and the given titles."""
    return [{"id": f"{prefix}-{i}", "title": title} for i, title in enumerate(titles)]


@pytest.fixture
def fake_adapter() -> Callable[..., FakeAdapter]:
    """Factory fixture for FakeAdapter."""
    return FakeAdapter


@pytest.fixture
def adapters() -> dict[str, FakeAdapter]:
    """Three healthy sources with two results each."""
    return {
        "alpha": FakeAdapter("alpha", "Alpha", records=make_records("a", ["Alpha one", "Alpha two"])),
        "beta": FakeAdapter("beta", "Beta", records=make_records("b", ["Beta one", "Beta two"])),
        "gamma": FakeAdapter("gamma", "Gamma", records=make_records("g", ["Gamma one", "Gamma two"])),
    }


# ============================================================
# HTTP Mocking
# ============================================================


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays one response."""

    def __init__(
        self,
        *,
        status_code: int = 200,
        json: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
        exc: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.json = json
        self.text = text
        self.headers = headers or {}
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text, headers=self.headers)
        return httpx.Response(self.status_code, json=self.json if self.json is not None else {}, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def mock_http() -> Callable[..., tuple[RecordingHandler, httpx.MockTransport]]:
    """Build a (handler, transport) pair for adapter tests."""

    def build(**kwargs: Any) -> tuple[RecordingHandler, httpx.MockTransport]:
        handler = RecordingHandler(**kwargs)
        return handler, httpx.MockTransport(handler)

    return build
