"""
Result Merging - ranking and optional deduplication of normalized results.

Pure functions over SearchResult lists; no I/O.

Ranking is deliberately simple: a stable sort that moves results whose
title contains the query (case-insensitive substring) ahead of the rest.
Within each group the incoming order (source order, then provider order)
is kept.

Example:
    >>> unique, stats = deduplicate(results)
    >>> ranked = rank_by_title_match(unique, "brown v. board")
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from legal_search.domain.entities import SearchResult


def title_matches(result: SearchResult, query: str) -> bool:
    """True when the query appears anywhere in the result title, ignoring case."""
    return query.lower() in result.title.lower()


def rank_by_title_match(results: Sequence[SearchResult], query: str) -> list[SearchResult]:
    """Stable sort: title matches first, original order preserved inside each group."""
    return sorted(results, key=lambda r: 0 if title_matches(r, query) else 1)


# =============================================================================
# Deduplication
# =============================================================================

def _normalize(text: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace."""
    if not text:
        return ""
    text = text.lower()
    text = re.sub(r"[^\w\s]", "", text)
    return re.sub(r"\s+", " ", text).strip()


def dedup_key(result: SearchResult) -> str | None:
    """
    Identity of the case a result describes.

    The normalized citation when there is one; otherwise title, court and
    date together. Results with neither a citation nor a title cannot be
    matched and get no key.
    """
    citation = _normalize(result.citation)
    if citation:
        return f"cite:{citation}"
    title = _normalize(result.title)
    if not title:
        return None
    return f"case:{title}|{_normalize(result.court)}|{result.date.strip()}"


@dataclass
class DedupStats:
    input_count: int = 0
    unique_count: int = 0

    @property
    def duplicates_removed(self) -> int:
        return self.input_count - self.unique_count


def deduplicate(results: Sequence[SearchResult]) -> tuple[list[SearchResult], DedupStats]:
    """Keep the first result for each dedup key; later repeats are dropped."""
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        key = dedup_key(result)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        unique.append(result)
    return unique, DedupStats(input_count=len(results), unique_count=len(unique))
