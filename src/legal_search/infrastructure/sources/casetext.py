"""
Casetext Client - Subscription case law search.

Every request needs a bearer token; without one the adapter fails fast
with AdapterUnauthorizedError and never touches the network.
"""

from __future__ import annotations

from typing import Any

from legal_search.domain.entities import (
    AccessType,
    SearchOptions,
    SourceCoverage,
    SourceDescriptor,
)

from .adapter import LegalSourceAdapter

CASETEXT_API = "https://api.casetext.com/v1"


class CasetextAdapter(LegalSourceAdapter):
    descriptor = SourceDescriptor(
        id="casetext",
        name="Casetext",
        access_type=AccessType.SUBSCRIPTION,
        base_url=CASETEXT_API,
        coverage=SourceCoverage(
            jurisdictions=("US", "Federal", "All States"),
            date_range="1700-present",
            document_types=("Cases", "Statutes", "Regulations"),
        ),
        description="Commercial legal research platform (subscription required)",
    )
    requires_api_key = True
    _connected_message = "Connected with API access"

    def _default_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        self._require_api_key()
        params: dict[str, Any] = {
            "q": query,
            "page_size": options.per_source_limit,
            "jurisdiction": options.jurisdiction,
            "court": options.court,
        }
        if options.date_range:
            params["date_start"] = options.date_range.start
            params["date_end"] = options.date_range.end

        data = await self._make_request("/search", params=params)
        return data.get("results", []) if isinstance(data, dict) else []

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": raw.get("id"),
            "title": raw.get("name"),
            "citation": raw.get("citation"),
            "court": raw.get("court"),
            "date": raw.get("date"),
            "snippet": raw.get("snippet"),
            "url": raw.get("url"),
        }

    async def _probe(self) -> None:
        await self._make_request("/search", params={"q": "test", "page_size": 1})
