"""
LawPipe Client - Case summaries API.

Requires a bearer token. LawPipe returns a `summary` per case, which is
surfaced as the result snippet.
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

LAWPIPE_API = "https://api.lawpipe.com/v1"


class LawPipeAdapter(LegalSourceAdapter):
    descriptor = SourceDescriptor(
        id="lawpipe",
        name="LawPipe",
        access_type=AccessType.API_KEY,
        base_url=LAWPIPE_API,
        coverage=SourceCoverage(
            jurisdictions=("US", "Federal", "All States"),
            date_range="1950-present",
            document_types=("Case Summaries",),
        ),
        description="Case law summaries with key points and tags",
    )
    requires_api_key = True
    _connected_message = "Connected with API access"

    def _default_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        self._require_api_key()
        params: dict[str, Any] = {
            "query": query,
            "limit": options.per_source_limit,
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
            "title": raw.get("title"),
            "citation": raw.get("citation"),
            "court": raw.get("court"),
            "date": raw.get("date"),
            "snippet": raw.get("summary"),
            "url": raw.get("url"),
        }

    async def _probe(self) -> None:
        await self._make_request("/cases/recent", params={"limit": 1})
