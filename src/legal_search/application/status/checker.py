"""
StatusChecker - Concurrent connection probes for every legal source.

Each adapter's test_connection() runs concurrently under its own timeout;
a probe that hangs or raises is reported as offline instead of delaying
or failing the whole report.

Reports are cached in a cachetools.TTLCache so that dashboards polling
the status endpoint do not hammer providers. An asyncio.Lock makes
concurrent callers share one round of probes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from cachetools import TTLCache

from legal_search.domain.entities import (
    ConnectionProbe,
    ConnectionStatus,
    SourceStatus,
    StatusReport,
)
from legal_search.infrastructure.sources import LegalSourceAdapter
from legal_search.shared.async_utils import settle_all, timeout_with_fallback
from legal_search.shared.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 30.0
DEFAULT_STATUS_TTL = 60.0
_REPORT_KEY = "all"


class StatusChecker:
    """
    Probe every registered adapter and report its ConnectionStatus.

    Args:
        adapters: Source id -> adapter
        probe_timeout: Seconds before a probe is recorded as offline
        cache_ttl: Seconds a report is reused; 0 disables caching

    Example:
        checker = StatusChecker(adapters, probe_timeout=10)
        report = await checker.check_all()
        for status in report.sources:
            print(status.source_id, status.status.value)
    """

    def __init__(
        self,
        adapters: Mapping[str, LegalSourceAdapter],
        *,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        cache_ttl: float = DEFAULT_STATUS_TTL,
    ) -> None:
        self._adapters = dict(adapters)
        self._probe_timeout = probe_timeout
        self._cache: TTLCache[str, StatusReport] | None = (
            TTLCache(maxsize=1, ttl=cache_ttl) if cache_ttl > 0 else None
        )
        self._lock = asyncio.Lock()

    async def check_all(self, *, force_refresh: bool = False) -> StatusReport:
        """
        Probe all sources concurrently.

        Args:
            force_refresh: Ignore any cached report

        Returns:
            StatusReport with one ConnectionStatus per adapter, in
            registry order
        """
        if not force_refresh:
            cached = self._cached()
            if cached is not None:
                logger.debug("Status report served from cache")
                return cached

        async with self._lock:
            if not force_refresh:
                cached = self._cached()
                if cached is not None:
                    return cached

            adapters = list(self._adapters.values())
            settled = await settle_all(*(self._check(adapter) for adapter in adapters))
            statuses = []
            for adapter, outcome in zip(adapters, settled):
                if outcome.ok and outcome.value is not None:
                    statuses.append(outcome.value)
                else:
                    statuses.append(self._offline(adapter, str(outcome.error) or "Connection failed"))

            report = StatusReport(sources=tuple(statuses))
            if self._cache is not None:
                self._cache[_REPORT_KEY] = report

            online = sum(1 for s in statuses if s.status is SourceStatus.ONLINE)
            logger.info(f"Status check: {online}/{len(statuses)} sources online")
            return report

    async def check_source(self, source_id: str) -> ConnectionStatus:
        """Probe a single source (never cached)."""
        adapter = self._adapters.get(source_id)
        if adapter is None:
            raise InvalidRequestError(f"Unknown source: {source_id}")
        return await self._check(adapter)

    def invalidate(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def _cached(self) -> StatusReport | None:
        if self._cache is None:
            return None
        return self._cache.get(_REPORT_KEY)

    async def _check(self, adapter: LegalSourceAdapter) -> ConnectionStatus:
        timeout_probe = ConnectionProbe(
            SourceStatus.OFFLINE,
            f"Connection test timed out after {self._probe_timeout:g}s",
            has_api_key=adapter.has_api_key,
        )
        try:
            probe = await timeout_with_fallback(
                adapter.test_connection(),
                timeout=self._probe_timeout,
                fallback=timeout_probe,
            )
        except Exception as e:
            logger.warning(f"{adapter.source_id} connection test raised: {e}")
            return self._offline(adapter, str(e) or "Connection failed")
        return ConnectionStatus.from_probe(adapter.source_id, adapter.name, probe)

    @staticmethod
    def _offline(adapter: LegalSourceAdapter, message: str) -> ConnectionStatus:
        return ConnectionStatus(
            source_id=adapter.source_id,
            name=adapter.name,
            status=SourceStatus.OFFLINE,
            has_api_key=adapter.has_api_key,
            message=message,
        )
