"""
Legal source adapters.

One module per provider; ADAPTER_CLASSES is the registry the aggregator
resolves source ids against.

Usage:
    from legal_search.infrastructure.sources import create_adapters

    adapters = create_adapters(api_keys={"court_listener": "..."})
    results = await adapters["court_listener"].search("miranda", SearchOptions())
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

import httpx

from .adapter import LegalSourceAdapter
from .base_client import BaseAPIClient
from .caselaw_access_project import CaselawAccessProjectAdapter
from .casetext import CasetextAdapter
from .court_listener import CourtListenerAdapter
from .findlaw import FindLawAdapter
from .google_scholar import GoogleScholarAdapter
from .govinfo import GovInfoAdapter
from .justia import JustiaAdapter
from .lawpipe import LawPipeAdapter
from .scraping import ScrapingAdapter
from .supreme_court_database import SupremeCourtDatabaseAdapter

logger = logging.getLogger(__name__)

ADAPTER_CLASSES: dict[str, type[LegalSourceAdapter]] = {
    cls.descriptor.id: cls
    for cls in (
        CourtListenerAdapter,
        CaselawAccessProjectAdapter,
        CasetextAdapter,
        FindLawAdapter,
        GoogleScholarAdapter,
        LawPipeAdapter,
        SupremeCourtDatabaseAdapter,
        GovInfoAdapter,
        JustiaAdapter,
    )
}


def create_adapters(
    api_keys: Mapping[str, str] | None = None,
    *,
    timeout: float = 30.0,
    disabled: Iterable[str] = (),
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, LegalSourceAdapter]:
    """
    Instantiate every registered adapter.

    Args:
        api_keys: Source id -> API key
        timeout: Per-request HTTP timeout in seconds
        disabled: Source ids whose descriptor is marked inactive
        transport: Shared httpx transport (tests)

    Returns:
        Adapters keyed by source id, in registry order
    """
    api_keys = api_keys or {}
    disabled = set(disabled)
    unknown = disabled - ADAPTER_CLASSES.keys()
    if unknown:
        logger.warning(f"Ignoring unknown disabled sources: {sorted(unknown)}")

    adapters: dict[str, LegalSourceAdapter] = {}
    for source_id, cls in ADAPTER_CLASSES.items():
        descriptor = cls.descriptor.deactivated() if source_id in disabled else None
        adapters[source_id] = cls(
            api_keys.get(source_id),
            timeout=timeout,
            transport=transport,
            descriptor=descriptor,
        )
    return adapters


async def close_adapters(adapters: Mapping[str, LegalSourceAdapter]) -> None:
    for adapter in adapters.values():
        await adapter.close()


__all__ = [
    "ADAPTER_CLASSES",
    "BaseAPIClient",
    "LegalSourceAdapter",
    "ScrapingAdapter",
    "CourtListenerAdapter",
    "CaselawAccessProjectAdapter",
    "CasetextAdapter",
    "FindLawAdapter",
    "GoogleScholarAdapter",
    "LawPipeAdapter",
    "SupremeCourtDatabaseAdapter",
    "GovInfoAdapter",
    "JustiaAdapter",
    "create_adapters",
    "close_adapters",
]
