"""
Google Scholar Client - Scrapes Google Scholar's case law search.

`as_sdt=6` restricts results to case law. Google aggressively walls
automated traffic: captcha pages and 403s surface as AdapterBlockedError
so the status page can show the source as blocked rather than offline.

Citation, year and court are not marked up separately; they are pulled
out of the `.gs_a` byline (e.g. "347 U.S. 483 - Supreme Court, 1954").
"""

from __future__ import annotations

import re
from typing import Any

from legal_search.domain.entities import (
    AccessType,
    SearchOptions,
    SourceCoverage,
    SourceDescriptor,
)

from .scraping import CAPTCHA_MARKERS, ScrapingAdapter, select_href, select_text

SCHOLAR_SITE = "https://scholar.google.com"
CASE_LAW_FILTER = "6"
MAX_RESULTS_PER_PAGE = 20

CITATION_PATTERNS = (
    re.compile(r"(\d+\s+U\.S\.\s+\d+)"),
    re.compile(r"(\d+\s+S\.\s?Ct\.\s+\d+)"),
    re.compile(r"(\d+\s+F\.\d+d\s+\d+)"),
    re.compile(r"(\d+\s+F\.\s+Supp\.\s+\d+d\s+\d+)"),
    re.compile(r"(\d+\s+F\.\s+Supp\.\s+\d+)"),
    re.compile(r"(\d+\s+[A-Za-z.]+\s+\d+)"),
)
YEAR_PATTERN = re.compile(r"\b(\d{4})\b")
COURT_KEYWORDS = ("Supreme Court", "Court of Appeals", "District Court", "Circuit")


def extract_citation(byline: str) -> str:
    for pattern in CITATION_PATTERNS:
        match = pattern.search(byline)
        if match:
            return match.group(1)
    return ""


def extract_year(byline: str) -> str:
    match = YEAR_PATTERN.search(byline)
    return match.group(1) if match else ""


def extract_court(byline: str) -> str:
    """Longest "<words> <court keyword>" run in the byline, e.g. "Supreme Court"."""
    for keyword in COURT_KEYWORDS:
        match = re.search(rf"([\w\s.]*{keyword})", byline, re.IGNORECASE)
        if match:
            # the byline reads "<citation> - <court>, <year>"
            return match.group(1).split(" - ")[-1].strip()
    return ""


class GoogleScholarAdapter(ScrapingAdapter):
    descriptor = SourceDescriptor(
        id="google_scholar",
        name="Google Scholar",
        access_type=AccessType.FREE,
        base_url=SCHOLAR_SITE,
        coverage=SourceCoverage(
            jurisdictions=("US", "Federal", "All States"),
            date_range="1950-present",
            document_types=("Case Law", "Legal Journals"),
        ),
        description="Google Scholar case law search (scraped, may be blocked)",
    )
    id_prefix = "scholar"
    block_markers = CAPTCHA_MARKERS
    _connected_message = "Connected to Google Scholar"
    _default_min_interval = 1.0

    async def search(self, query: str, options: SearchOptions) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "q": query,
            "as_sdt": CASE_LAW_FILTER,
            "num": min(options.per_source_limit, MAX_RESULTS_PER_PAGE),
            "hl": "en",
        }
        if options.date_range:
            params["as_ylo"] = options.date_range.start_year
            params["as_yhi"] = options.date_range.end_year

        soup = await self._fetch_page("/scholar", params=params)
        records = []
        for item in soup.select(".gs_ri"):
            byline = select_text(item, ".gs_a")
            records.append({
                "title": select_text(item, ".gs_rt a") or select_text(item, ".gs_rt"),
                "url": self._absolute_url(select_href(item, ".gs_rt a")),
                "snippet": select_text(item, ".gs_rs"),
                "citation": extract_citation(byline),
                "date": extract_year(byline),
                "court": extract_court(byline),
            })
        return self._number(records)

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        return raw

    async def _probe(self) -> None:
        await self._fetch_page("/scholar", params={"q": "test", "as_sdt": CASE_LAW_FILTER})
