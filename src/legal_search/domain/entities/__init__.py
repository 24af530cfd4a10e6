"""
Domain Entities

Core business objects for legal source search.
"""

from __future__ import annotations

from .search import (
    DEFAULT_PER_SOURCE_LIMIT,
    DEFAULT_RESULT_LIMIT,
    AggregatedSearch,
    DateRange,
    OutcomeStatus,
    SearchOptions,
    SearchQuery,
    SearchResult,
    SourceOutcome,
)
from .source import AccessType, RateLimitPolicy, SourceCoverage, SourceDescriptor
from .status import (
    ConnectionProbe,
    ConnectionStatus,
    SourceStatus,
    StatusReport,
    utc_now_iso,
)

__all__ = [
    # Source entities
    "SourceDescriptor",
    "SourceCoverage",
    "RateLimitPolicy",
    "AccessType",
    # Search entities
    "SearchOptions",
    "SearchQuery",
    "SearchResult",
    "SourceOutcome",
    "OutcomeStatus",
    "DateRange",
    "AggregatedSearch",
    "DEFAULT_RESULT_LIMIT",
    "DEFAULT_PER_SOURCE_LIMIT",
    # Status entities
    "ConnectionProbe",
    "ConnectionStatus",
    "SourceStatus",
    "StatusReport",
    "utc_now_iso",
]
