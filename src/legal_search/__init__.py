"""
Legal Search - Concurrent search across heterogeneous case law sources.

Fans a query out to CourtListener, the Caselaw Access Project, Casetext,
FindLaw, Google Scholar, LawPipe, the Supreme Court Database, GovInfo and
Justia; normalizes every provider's records into one SearchResult shape;
tolerates per-source failure; ranks and truncates the merged list.

Usage:
    from legal_search import SearchAggregator, SearchOptions, create_adapters

    aggregator = SearchAggregator(create_adapters())
    page = await aggregator.search_all(
        "Miranda v. Arizona",
        ["court_listener", "supreme_court_database"],
        SearchOptions(limit=10),
    )

    for result in page.results:
        print(f"[{result.source}] {result.title} ({result.citation})")

Features:
    - Settle-all fan-out: one slow or broken provider never sinks a search
    - Per-source outcome reporting (fulfilled / failed with reason)
    - Connection status probes with timeout and short-lived caching
    - Optional cross-source deduplication by citation
    - FastAPI HTTP surface (see legal_search.api)
"""

__version__ = "0.1.0"

from .application.search import SearchAggregator
from .application.status import StatusChecker
from .domain.entities import (
    AggregatedSearch,
    ConnectionStatus,
    DateRange,
    SearchOptions,
    SearchResult,
    SourceDescriptor,
    SourceOutcome,
    StatusReport,
)
from .infrastructure.sources import ADAPTER_CLASSES, create_adapters

__all__ = [
    # High-level API
    "SearchAggregator",
    "StatusChecker",
    "create_adapters",
    "ADAPTER_CLASSES",
    # Entities
    "AggregatedSearch",
    "ConnectionStatus",
    "DateRange",
    "SearchOptions",
    "SearchResult",
    "SourceDescriptor",
    "SourceOutcome",
    "StatusReport",
]
