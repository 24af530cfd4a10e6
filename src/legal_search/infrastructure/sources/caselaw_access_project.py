"""
Caselaw Access Project Client - Harvard Law School Library case corpus.

API Documentation: https://case.law/docs/site_features/api

Anonymous access returns metadata and previews; a token
(`Authorization: Token <key>`) unlocks full case bodies and a higher quota.
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

CAP_API = "https://api.case.law/v1"


class CaselawAccessProjectAdapter(LegalSourceAdapter):
    """Search published U.S. case law through the CAP API."""

    descriptor = SourceDescriptor(
        id="caselaw_access_project",
        name="Caselaw Access Project",
        access_type=AccessType.FREE,
        base_url=CAP_API,
        rate_limit=RateLimitPolicy(requests=1000, period="day"),
        coverage=SourceCoverage(
            jurisdictions=("US", "All States"),
            date_range="1658-2018",
            document_types=("All Published Cases",),
        ),
        description="Harvard Law School's digitized collection of published U.S. cases",
    )
    accepts_api_key = True

    def _default_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Token {self._api_key}"
        return headers

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "search": query,
            "page_size": options.per_source_limit,
            "jurisdiction": options.jurisdiction,
            "court": options.court,
        }
        if options.date_range:
            params["decision_date_min"] = options.date_range.start
            params["decision_date_max"] = options.date_range.end

        data = await self._make_request("/cases/", params=params)
        return data.get("results", []) if isinstance(data, dict) else []

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        citation = raw.get("citation")
        if not citation and raw.get("citations"):
            citation = raw["citations"][0].get("cite")
        court = raw.get("court")
        preview = raw.get("preview") or []
        return {
            "id": raw.get("id"),
            "title": raw.get("name") or raw.get("name_abbreviation"),
            "citation": citation,
            "court": court.get("name") if isinstance(court, dict) else court,
            "date": raw.get("decision_date"),
            "snippet": " ".join(p for p in preview if p),
            "url": raw.get("frontend_url"),
        }

    async def _probe(self) -> None:
        await self._make_request("/jurisdictions/")
