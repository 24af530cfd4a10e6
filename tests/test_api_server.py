"""
Tests for the FastAPI server.

The container's adapter registry is overridden with in-memory fakes, so
these exercise routing, request parsing and response shapes only.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from legal_search import __version__
from legal_search.api.__main__ import main
from legal_search.api.server import create_app
from legal_search.config import Settings
from legal_search.container import ApplicationContainer
from legal_search.shared.exceptions import AdapterNetworkError

from conftest import FakeAdapter


@pytest.fixture
def container(adapters):
    container = ApplicationContainer()
    container.config.from_dict(Settings().to_dict())
    container.adapters.override(providers.Object(adapters))
    return container


@pytest.fixture
def client(container):
    return TestClient(create_app(container))


# ============================================================================
# POST /api/legal-sources/search
# ============================================================================


class TestSearchEndpoint:
    def test_partial_failure_is_200(self, client, adapters):
        adapters["beta"].error = AdapterNetworkError("connection reset")

        response = client.post(
            "/api/legal-sources/search",
            json={"query": "one", "sources": ["alpha", "beta", "gamma"]},
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["results"]) == 4
        assert body["total"] == 4
        assert body["sources"] == ["alpha", "beta", "gamma"]
        assert body["perSource"][1]["status"] == "failed"
        assert body["perSource"][1]["errors"] == ["connection reset"]
        assert set(body["results"][0]) == {"id", "title", "citation", "court", "date", "snippet", "url", "source"}

    def test_all_failed_is_still_200(self, client, adapters):
        for adapter in adapters.values():
            adapter.error = RuntimeError("down")

        response = client.post("/api/legal-sources/search", json={"query": "x", "sources": list(adapters)})

        assert response.status_code == 200
        assert response.json()["results"] == []
        assert response.json()["total"] == 0

    def test_options_are_applied(self, client, adapters):
        response = client.post(
            "/api/legal-sources/search",
            json={
                "query": "one",
                "sources": ["alpha", "beta"],
                "options": {
                    "limit": 1,
                    "court": "scotus",
                    "dateRange": {"start": "1950-01-01", "end": "1960-12-31"},
                },
            },
        )

        body = response.json()
        assert len(body["results"]) == 1
        assert body["total"] == 4
        options = adapters["alpha"].calls[0][1]
        assert options.court == "scotus"
        assert options.date_range.start == "1950-01-01"
        assert options.per_source_limit == 1

    @pytest.mark.parametrize(
        "payload",
        [
            {"query": "", "sources": ["alpha"]},
            {"query": "x", "sources": []},
            {"sources": ["alpha"]},
        ],
    )
    def test_missing_query_or_sources_is_400(self, client, payload):
        response = client.post("/api/legal-sources/search", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Query and sources are required"

    def test_bad_limit_is_400(self, client):
        response = client.post(
            "/api/legal-sources/search",
            json={"query": "x", "sources": ["alpha"], "options": {"limit": -1}},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid limit"

    def test_malformed_body_is_400(self, client):
        response = client.post(
            "/api/legal-sources/search",
            json={"query": "x", "sources": "alpha", "options": {"limit": "many"}},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"
        assert "details" in response.json()

    def test_malformed_provider_record_is_still_200(self, container, adapters):
        class Broken(FakeAdapter):
            def _normalize(self, raw):
                raise KeyError("title")

        adapters["broken"] = Broken("broken", records=[{"id": "1"}])
        container.adapters.override(providers.Object(adapters))
        client = TestClient(create_app(container))

        response = client.post(
            "/api/legal-sources/search",
            json={"query": "one", "sources": ["alpha", "broken"]},
        )

        assert response.status_code == 200
        body = response.json()
        assert [r["id"] for r in body["results"]] == ["a-0", "a-1"]
        assert body["perSource"][1]["status"] == "failed"
        assert body["perSource"][1]["errorKind"] == "network"

    def test_merge_failure_is_500(self, client):
        with patch(
            "legal_search.application.search.aggregator.rank_by_title_match",
            side_effect=TypeError("unorderable"),
        ):
            response = client.post("/api/legal-sources/search", json={"query": "x", "sources": ["alpha"]})

        assert response.status_code == 500
        assert response.json()["error"] == "Search failed"
        assert response.json()["details"] == "unorderable"


# ============================================================================
# GET endpoints
# ============================================================================


class TestStatusEndpoint:
    def test_status_report(self, client, adapters):
        adapters["gamma"].probe_error = AdapterNetworkError("HTTP 503")

        response = client.get("/api/legal-sources/status")

        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
        sources = response.json()["sources"]
        assert [s["sourceId"] for s in sources] == ["alpha", "beta", "gamma"]
        assert sources[2]["status"] == "offline"
        assert sources[2]["message"] == "HTTP 503"

    def test_refresh_flag(self, client, adapters):
        client.get("/api/legal-sources/status")
        client.get("/api/legal-sources/status")
        assert adapters["alpha"].probes == 1

        client.get("/api/legal-sources/status", params={"refresh": "true"})
        assert adapters["alpha"].probes == 2


class TestCatalogAndHealth:
    def test_catalog(self, client):
        response = client.get("/api/legal-sources")

        sources = response.json()["sources"]
        assert [s["id"] for s in sources] == ["alpha", "beta", "gamma"]
        assert sources[0]["name"] == "Alpha"
        assert sources[0]["accessType"] == "free"
        assert sources[0]["isActive"] is True

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "service": "legal-search",
            "version": __version__,
            "sources": 3,
        }

    def test_cors(self, client):
        response = client.get("/health", headers={"Origin": "https://example.org"})

        assert response.headers["access-control-allow-origin"] in ("*", "https://example.org")


# ============================================================================
# Lifespan and entry point
# ============================================================================


class TestLifecycle:
    def test_shutdown_closes_adapters(self, container, adapters):
        with TestClient(create_app(container)) as client:
            client.get("/health")

        assert all(adapter.closed for adapter in adapters.values())

    def test_main_parses_arguments(self):
        with patch("legal_search.api.__main__.run_api_server") as run:
            main(["--host", "0.0.0.0", "--port", "9001", "--log-level", "DEBUG"])

        run.assert_called_once()
        assert run.call_args.kwargs["host"] == "0.0.0.0"
        assert run.call_args.kwargs["port"] == 9001
