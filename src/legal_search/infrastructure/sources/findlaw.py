"""
FindLaw Client - Scrapes the FindLaw case law search page.

FindLaw publishes no API; results are parsed from the `.search-result`
blocks of https://caselaw.findlaw.com/search.
"""

from __future__ import annotations

from typing import Any

from legal_search.domain.entities import (
    AccessType,
    SearchOptions,
    SourceCoverage,
    SourceDescriptor,
)

from .scraping import ScrapingAdapter, select_href, select_text

FINDLAW_SITE = "https://caselaw.findlaw.com"


class FindLawAdapter(ScrapingAdapter):
    descriptor = SourceDescriptor(
        id="findlaw",
        name="FindLaw",
        access_type=AccessType.FREE,
        base_url=FINDLAW_SITE,
        coverage=SourceCoverage(
            jurisdictions=("US", "All States", "Federal"),
            date_range="1900-present",
            document_types=("Cases", "Statutes", "Regulations"),
        ),
        description="Thomson Reuters' free case law and codes library",
    )
    id_prefix = "findlaw"
    _connected_message = "Connected to FindLaw"
    _default_min_interval = 0.5

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "query": query,
            "court": options.court,
            "jurisdiction": options.jurisdiction,
        }
        if options.date_range:
            params["startDate"] = options.date_range.start
            params["endDate"] = options.date_range.end

        soup = await self._fetch_page("/search", params=params)
        records = [
            {
                "title": select_text(item, ".case-title"),
                "url": self._absolute_url(select_href(item, ".case-title a")),
                "court": select_text(item, ".case-court"),
                "date": select_text(item, ".case-date"),
                "snippet": select_text(item, ".case-snippet"),
                "citation": select_text(item, ".case-citation"),
            }
            for item in soup.select(".search-result")
        ]
        return self._number(records[: options.per_source_limit])

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        return raw

    async def _probe(self) -> None:
        await self._make_request("/", expect_json=False)
