"""
CourtListener Client - Free Law Project opinion search.

API Documentation: https://www.courtlistener.com/help/api/rest/

Works anonymously with a low quota; an API token (sent as
`Authorization: Token <key>`) lifts the limit to 5000 requests/hour.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from legal_search.domain.entities import (
    AccessType,
    RateLimitPolicy,
    SearchOptions,
    SourceCoverage,
    SourceDescriptor,
)
from legal_search.shared.exceptions import AdapterRateLimitedError

from .adapter import LegalSourceAdapter

logger = logging.getLogger(__name__)

COURTLISTENER_SITE = "https://www.courtlistener.com"
COURTLISTENER_API = f"{COURTLISTENER_SITE}/api/rest/v4"


class CourtListenerAdapter(LegalSourceAdapter):
    """Search opinions through the CourtListener REST API."""

    descriptor = SourceDescriptor(
        id="court_listener",
        name="CourtListener",
        access_type=AccessType.FREE,
        base_url=COURTLISTENER_API,
        rate_limit=RateLimitPolicy(requests=5000, period="hour"),
        coverage=SourceCoverage(
            jurisdictions=("US", "Federal", "All States"),
            date_range="1658-present",
            document_types=("Opinions", "Dockets", "Oral Arguments"),
        ),
        description="Free Law Project database of court opinions and dockets",
    )
    accepts_api_key = True

    def _default_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Token {self._api_key}"
        return headers

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "q": query,
            "type": "o",
            "page_size": options.per_source_limit,
            "court": options.court,
        }
        if options.date_range:
            params["filed_after"] = options.date_range.start
            params["filed_before"] = options.date_range.end

        data = await self._make_request("/search/", params=params)
        results = data.get("results", []) if isinstance(data, dict) else []
        logger.debug(f"CourtListener returned {len(results)} opinions for {query!r}")
        return results

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        citation = raw.get("citation")
        if isinstance(citation, list):
            citation = citation[0] if citation else ""
        if isinstance(citation, dict):
            citation = citation.get("cite", "")

        snippet = raw.get("snippet")
        if not snippet and raw.get("opinions"):
            snippet = raw["opinions"][0].get("snippet", "")

        absolute_url = raw.get("absolute_url") or ""
        url = f"{COURTLISTENER_SITE}{absolute_url}" if absolute_url.startswith("/") else absolute_url

        return {
            "id": raw.get("cluster_id") or raw.get("id"),
            "title": raw.get("caseName") or raw.get("case_name"),
            "citation": citation,
            "court": raw.get("court"),
            "date": raw.get("dateFiled") or raw.get("date_filed"),
            "snippet": snippet,
            "url": url,
        }

    async def _probe(self) -> None:
        await self._make_request("/search/", params={"q": "test", "type": "o", "page_size": 1})

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code == 429:
            try:
                wait_until = response.json().get("wait_until")
            except (ValueError, AttributeError):
                wait_until = None
            hint = f"Wait until: {wait_until}" if wait_until else "Please try again later."
            raise AdapterRateLimitedError(
                f"Rate limited. {hint}",
                retry_after=self._get_retry_after(response),
                source_id=self.source_id,
            )
        super()._raise_for_status(response)
