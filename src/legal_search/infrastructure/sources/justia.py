"""
Justia Client - Scrapes Justia's free law search.

Justia offers no public search API. Each `.search-result` block carries a
case link plus court, date, citation and snippet spans.
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

JUSTIA_SITE = "https://law.justia.com"

TITLE_SELECTORS = (".case-name a", ".title a", "h3 a", "a")


class JustiaAdapter(ScrapingAdapter):
    descriptor = SourceDescriptor(
        id="justia",
        name="Justia",
        access_type=AccessType.FREE,
        base_url=JUSTIA_SITE,
        coverage=SourceCoverage(
            jurisdictions=("US", "Federal", "All States"),
            date_range="1790-present",
            document_types=("Cases", "Codes", "Regulations"),
        ),
        description="Free case law, codes and regulations",
    )
    id_prefix = "justia"
    _connected_message = "Connected to Justia"
    _default_min_interval = 0.5

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"query": query, "jurisdiction": options.jurisdiction}
        soup = await self._fetch_page("/search", params=params)

        records = []
        for item in soup.select(".search-result"):
            selector = next((s for s in TITLE_SELECTORS if item.select_one(s)), None)
            if selector is None:
                continue
            records.append({
                "title": select_text(item, selector),
                "url": self._absolute_url(select_href(item, selector)),
                "court": select_text(item, ".court"),
                "date": select_text(item, ".date"),
                "citation": select_text(item, ".citation"),
                "snippet": select_text(item, ".snippet"),
            })
        return self._number(records[: options.per_source_limit])

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        return raw

    async def _probe(self) -> None:
        await self._make_request("/", expect_json=False)
