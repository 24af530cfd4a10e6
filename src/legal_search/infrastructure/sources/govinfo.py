"""
GovInfo Client - U.S. Government Publishing Office court opinions.

Uses GovInfo's Search Service restricted to the USCOURTS collection
(opinions from federal appellate, district and bankruptcy courts).

Docs: https://api.govinfo.gov/docs/

Without a registered key the public DEMO_KEY is used, which works but is
heavily throttled; the source then reports itself as limited.
"""

from __future__ import annotations

from typing import Any

from legal_search.domain.entities import (
    AccessType,
    RateLimitPolicy,
    SearchOptions,
    SourceCoverage,
    SourceDescriptor,
)

from .adapter import LegalSourceAdapter

GOVINFO_API = "https://api.govinfo.gov"
DEMO_KEY = "DEMO_KEY"
COURT_COLLECTION = "USCOURTS"


class GovInfoAdapter(LegalSourceAdapter):
    descriptor = SourceDescriptor(
        id="govinfo",
        name="GovInfo.gov",
        access_type=AccessType.API_KEY,
        base_url=GOVINFO_API,
        rate_limit=RateLimitPolicy(requests=1000, period="hour"),
        coverage=SourceCoverage(
            jurisdictions=("US", "Federal"),
            date_range="2004-present",
            document_types=("Federal Court Opinions",),
        ),
        description="U.S. Courts opinions published by the Government Publishing Office",
    )
    accepts_api_key = True

    def _default_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "X-Api-Key": self._api_key or DEMO_KEY,
        }

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        search_query = f"{query} collection:{COURT_COLLECTION}"
        if options.date_range and options.date_range.start_year:
            search_query += f" publishdate:range({options.date_range.start},{options.date_range.end})"

        payload = {
            "query": search_query,
            "pageSize": options.per_source_limit,
            "offsetMark": "*",
            "sorts": [{"field": "relevancy", "sortOrder": "DESC"}],
        }
        data = await self._make_request("/search", method="POST", data=payload)
        return data.get("results", []) if isinstance(data, dict) else []

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        authors = raw.get("governmentAuthor") or []
        download = raw.get("download") or {}
        return {
            "id": raw.get("packageId") or raw.get("granuleId"),
            "title": raw.get("title"),
            "citation": raw.get("caseNumber"),
            "court": authors[-1] if authors else "",
            "date": raw.get("dateIssued"),
            "snippet": raw.get("summary"),
            "url": download.get("pdfLink") or raw.get("resultLink"),
        }

    async def _probe(self) -> None:
        await self._make_request("/collections")
