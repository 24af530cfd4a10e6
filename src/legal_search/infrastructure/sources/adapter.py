"""
Legal Source Adapter - Uniform search interface over one external provider.

Every provider module subclasses LegalSourceAdapter and supplies:
- `descriptor`: static SourceDescriptor (class attribute)
- `search()`: build and send the provider request, return raw records
- `_normalize()`: map one raw record to SearchResult fields
- `_probe()`: cheapest request that proves the provider is reachable

The base class owns everything that must hold for *all* providers:
normalized fields are always strings, `source` is always the descriptor
name, and test_connection() always answers with a ConnectionProbe.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

import httpx

from legal_search.domain.entities import (
    ConnectionProbe,
    SearchOptions,
    SearchResult,
    SourceDescriptor,
    SourceStatus,
)
from legal_search.shared.async_utils import RateLimiter
from legal_search.shared.exceptions import (
    AdapterBlockedError,
    AdapterError,
    AdapterUnauthorizedError,
)

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

RESULT_FIELDS = ("id", "title", "citation", "court", "date", "snippet", "url")


def _text(value: Any) -> str:
    """Coerce a provider value to a clean string ("" for missing)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value)


class LegalSourceAdapter(BaseAPIClient, ABC):
    """
    Base class for all legal source adapters.

    Attributes:
        descriptor: Static description of the provider
        requires_api_key: Provider refuses every request without a key
        accepts_api_key: Provider works without a key but a key lifts limits
    """

    descriptor: SourceDescriptor
    requires_api_key: ClassVar[bool] = False
    accepts_api_key: ClassVar[bool] = False
    _default_min_interval: ClassVar[float] = 0.0
    _connected_message: ClassVar[str | None] = None

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: float = 30.0,
        max_retries: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
        descriptor: SourceDescriptor | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        if descriptor is not None:
            self.descriptor = descriptor
        self._service_name = self.descriptor.name
        self._source_id = self.descriptor.id
        self._api_key = api_key or None
        self._quota = (
            RateLimiter.from_policy(self.descriptor.rate_limit, name=self._service_name)
            if self.descriptor.rate_limit
            else None
        )
        super().__init__(
            base_url=self.descriptor.base_url,
            timeout=timeout,
            min_interval=self._default_min_interval,
            headers={**self._default_headers(), **(headers or {})},
            max_retries=max_retries,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def source_id(self) -> str:
        return self.descriptor.id

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def has_api_key(self) -> bool:
        return self._api_key is not None

    def _default_headers(self) -> dict[str, str]:
        """Headers sent on every request; override for auth schemes."""
        return {"Accept": "application/json"}

    def _require_api_key(self) -> str:
        if self._api_key is None:
            raise AdapterUnauthorizedError("No API key provided", source_id=self.source_id)
        return self._api_key

    async def _rate_limit(self) -> None:
        await super()._rate_limit()
        if self._quota is not None:
            await self._quota.acquire()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    @abstractmethod
    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        """Query the provider and return its raw records."""

    @abstractmethod
    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Map one raw record to SearchResult field values (source excluded)."""

    def normalize(self, raw: dict[str, Any]) -> SearchResult:
        """Build a SearchResult; missing fields become "" and source is this adapter."""
        fields = self._normalize(raw)
        return SearchResult(
            **{key: _text(fields.get(key)) for key in RESULT_FIELDS},
            source=self.descriptor.name,
        )

    # ------------------------------------------------------------------
    # Connection test
    # ------------------------------------------------------------------

    @abstractmethod
    async def _probe(self) -> None:
        """Issue the cheapest request that proves the provider answers."""

    async def test_connection(self) -> ConnectionProbe:
        """
        Probe the provider.

        Returns:
            online when reachable (and keyed when a key matters),
            limited when reachable without an optional key,
            blocked when a bot wall answers,
            offline on any other failure.
        """
        if self.requires_api_key and not self.has_api_key:
            return ConnectionProbe(SourceStatus.OFFLINE, "No API key provided", has_api_key=False)

        try:
            await self._probe()
        except AdapterBlockedError as e:
            return ConnectionProbe(SourceStatus.BLOCKED, str(e), has_api_key=self.has_api_key)
        except AdapterError as e:
            logger.info(f"{self.name} connection test failed: {e}")
            return ConnectionProbe(SourceStatus.OFFLINE, str(e), has_api_key=self.has_api_key)

        if self.accepts_api_key and not self.has_api_key:
            return ConnectionProbe(
                SourceStatus.LIMITED,
                "Limited access without API key",
                has_api_key=False,
            )
        message = self._connected_message or (
            "Connected with API key" if self.has_api_key else f"Connected to {self.name}"
        )
        return ConnectionProbe(SourceStatus.ONLINE, message, has_api_key=self.has_api_key)
