"""Tests for StatusChecker probes, timeouts and caching."""

from __future__ import annotations

import asyncio

import pytest

from legal_search.application.status import StatusChecker
from legal_search.domain.entities import SourceStatus
from legal_search.shared.exceptions import AdapterBlockedError, AdapterNetworkError, InvalidRequestError


class TestCheckAll:
    async def test_reports_every_source_in_order(self, adapters):
        report = await StatusChecker(adapters).check_all()

        assert [s.source_id for s in report.sources] == ["alpha", "beta", "gamma"]
        assert all(s.status is SourceStatus.ONLINE for s in report.sources)
        assert report.sources[0].message == "Connected to Alpha"

    async def test_adapter_failures_map_to_states(self, adapters):
        adapters["alpha"].probe_error = AdapterNetworkError("HTTP 503")
        adapters["beta"].probe_error = AdapterBlockedError("captcha")

        report = await StatusChecker(adapters).check_all()
        by_id = {s.source_id: s for s in report.sources}

        assert by_id["alpha"].status is SourceStatus.OFFLINE
        assert by_id["alpha"].message == "HTTP 503"
        assert by_id["beta"].status is SourceStatus.BLOCKED
        assert by_id["gamma"].status is SourceStatus.ONLINE

    async def test_unexpected_exception_is_offline(self, adapters):
        adapters["gamma"].probe_error = RuntimeError("socket exploded")

        report = await StatusChecker(adapters).check_all()

        gamma = report.sources[2]
        assert gamma.status is SourceStatus.OFFLINE
        assert gamma.message == "socket exploded"

    async def test_hung_probe_times_out(self, adapters):
        adapters["beta"].probe_delay = 1.0
        checker = StatusChecker(adapters, probe_timeout=0.05)

        report = await checker.check_all()

        beta = report.sources[1]
        assert beta.status is SourceStatus.OFFLINE
        assert beta.message == "Connection test timed out after 0.05s"
        assert report.sources[0].status is SourceStatus.ONLINE

    async def test_probes_run_concurrently(self, adapters):
        for adapter in adapters.values():
            adapter.probe_delay = 0.1
        loop = asyncio.get_running_loop()

        start = loop.time()
        await StatusChecker(adapters).check_all()

        assert loop.time() - start < 0.25

    async def test_to_dict_shape(self, adapters):
        report = await StatusChecker(adapters).check_all()

        body = report.to_dict()

        assert set(body) == {"sources", "timestamp"}
        assert set(body["sources"][0]) == {"sourceId", "name", "status", "hasApiKey", "message", "timestamp"}
        assert body["sources"][0]["status"] == "online"


class TestCaching:
    async def test_report_is_cached(self, adapters):
        checker = StatusChecker(adapters, cache_ttl=60)

        first = await checker.check_all()
        second = await checker.check_all()

        assert second is first
        assert adapters["alpha"].probes == 1

    async def test_force_refresh_bypasses_cache(self, adapters):
        checker = StatusChecker(adapters, cache_ttl=60)

        await checker.check_all()
        await checker.check_all(force_refresh=True)

        assert adapters["alpha"].probes == 2

    async def test_zero_ttl_disables_cache(self, adapters):
        checker = StatusChecker(adapters, cache_ttl=0)

        await checker.check_all()
        await checker.check_all()

        assert adapters["alpha"].probes == 2

    async def test_invalidate(self, adapters):
        checker = StatusChecker(adapters)

        await checker.check_all()
        checker.invalidate()
        await checker.check_all()

        assert adapters["alpha"].probes == 2

    async def test_concurrent_callers_share_one_round(self, adapters):
        for adapter in adapters.values():
            adapter.probe_delay = 0.05
        checker = StatusChecker(adapters)

        await asyncio.gather(checker.check_all(), checker.check_all(), checker.check_all())

        assert adapters["alpha"].probes == 1


class TestCheckSource:
    async def test_single_source(self, adapters):
        status = await StatusChecker(adapters).check_source("beta")

        assert status.source_id == "beta"
        assert status.name == "Beta"
        assert status.status is SourceStatus.ONLINE

    async def test_unknown_source(self, adapters):
        with pytest.raises(InvalidRequestError, match="Unknown source: nope"):
            await StatusChecker(adapters).check_source("nope")
