"""Multi-source search: fan-out, merge, rank."""

from .aggregator import SearchAggregator
from .ranking import deduplicate, dedup_key, rank_by_title_match, title_matches

__all__ = [
    "SearchAggregator",
    "deduplicate",
    "dedup_key",
    "rank_by_title_match",
    "title_matches",
]
