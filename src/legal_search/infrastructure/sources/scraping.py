"""
HTML scraping support for providers that publish no API.

Scraped sites are fetched with a browser User-Agent and parsed with
BeautifulSoup. A 403 or a captcha page means the site walled us off,
which is reported as AdapterBlockedError rather than a network failure.
"""

from __future__ import annotations

from typing import Any, ClassVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from legal_search.shared.exceptions import AdapterBlockedError

from .adapter import BROWSER_USER_AGENT, LegalSourceAdapter

CAPTCHA_MARKERS = ("captcha", "unusual traffic")


def select_text(element: Tag, selector: str) -> str:
    """Stripped text of the first match of `selector` under `element` ("" if absent)."""
    found = element.select_one(selector)
    return found.get_text(" ", strip=True) if found else ""


def select_href(element: Tag, selector: str) -> str:
    found = element.select_one(selector)
    if found is None:
        return ""
    href = found.get("href") or ""
    return href if isinstance(href, str) else href[0]


class ScrapingAdapter(LegalSourceAdapter):
    """LegalSourceAdapter for HTML search pages."""

    _forbidden_means_blocked = True
    # prefix for positional ids, e.g. "findlaw" -> "findlaw_0"
    id_prefix: ClassVar[str] = ""
    # page text that signals a bot wall instead of results
    block_markers: ClassVar[tuple[str, ...]] = ()

    def _default_headers(self) -> dict[str, str]:
        return {
            "User-Agent": BROWSER_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def _fetch_page(self, path: str, params: dict[str, Any] | None = None) -> BeautifulSoup:
        html = await self._make_request(path, params=params, expect_json=False)
        self._check_blocked(html)
        return BeautifulSoup(html, "html.parser")

    def _check_blocked(self, html: str) -> None:
        lowered = html.lower()
        if any(marker in lowered for marker in self.block_markers):
            raise AdapterBlockedError(
                f"{self.name} is showing a captcha or has blocked automated access",
                source_id=self.source_id,
            )

    def _absolute_url(self, href: str) -> str:
        return urljoin(f"{self._base_url}/", href) if href else ""

    def _number(self, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Attach positional ids to records parsed from one page."""
        return [{**record, "id": f"{self.id_prefix}_{i}"} for i, record in enumerate(records)]
