"""
Search Entities - Request options, normalized results and per-source outcomes.

Key Entities:
    - SearchOptions: Limit and filters applied to one aggregate search
    - SearchQuery: Query text plus the sources it targets
    - SearchResult: One normalized case/document, identical across providers
    - SourceOutcome: Whether one source succeeded for one request
    - AggregatedSearch: The merged page returned to callers

All wire shapes use camelCase keys (see to_dict methods).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ...shared.exceptions import FailureKind

DEFAULT_RESULT_LIMIT = 50
DEFAULT_PER_SOURCE_LIMIT = 10


class OutcomeStatus(Enum):
    """Settled state of one adapter call."""

    FULFILLED = "fulfilled"
    FAILED = "failed"


@dataclass(frozen=True)
class DateRange:
    """Inclusive ISO-8601 date bounds; either side may be empty."""

    start: str = ""
    end: str = ""

    @property
    def start_year(self) -> str:
        return self.start[:4]

    @property
    def end_year(self) -> str:
        return self.end[:4]

    def __bool__(self) -> bool:
        return bool(self.start or self.end)

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class SearchOptions:
    """
    Options for an aggregate search.

    Attributes:
        limit: Maximum merged results returned; unset means 50 merged and
            10 requested from each provider
        jurisdiction: Provider-specific jurisdiction filter
        court: Provider-specific court filter
        date_range: Decision date bounds
        deduplicate: Drop repeated cases reported by several sources
    """

    limit: int | None = None
    jurisdiction: str | None = None
    court: str | None = None
    date_range: DateRange | None = None
    deduplicate: bool = False

    @property
    def result_limit(self) -> int:
        """Maximum number of merged results returned."""
        return self.limit or DEFAULT_RESULT_LIMIT

    @property
    def per_source_limit(self) -> int:
        """Number of records requested from each provider."""
        return self.limit or DEFAULT_PER_SOURCE_LIMIT

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SearchOptions:
        data = data or {}
        date_range = data.get("dateRange") or data.get("date_range")
        return cls(
            limit=data.get("limit"),
            jurisdiction=data.get("jurisdiction") or None,
            court=data.get("court") or None,
            date_range=DateRange(
                start=date_range.get("start") or "",
                end=date_range.get("end") or "",
            ) if date_range else None,
            deduplicate=bool(data.get("deduplicate", False)),
        )


@dataclass(frozen=True)
class SearchQuery:
    """Query text plus the source ids it should be sent to."""

    text: str
    source_ids: tuple[str, ...]
    options: SearchOptions = field(default_factory=SearchOptions)


@dataclass(frozen=True)
class SearchResult:
    """
    One normalized result.

    Every field is a string and never None; providers that lack a field
    yield "". `id` is only unique within its source.
    """

    id: str
    title: str
    citation: str
    court: str
    date: str
    snippet: str
    url: str
    source: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "citation": self.citation,
            "court": self.court,
            "date": self.date,
            "snippet": self.snippet,
            "url": self.url,
            "source": self.source,
        }


@dataclass(frozen=True)
class SourceOutcome:
    """Per-request record of how one adapter call settled."""

    source_id: str
    status: OutcomeStatus
    count: int = 0
    errors: tuple[str, ...] = ()
    error_kind: FailureKind | None = None

    @classmethod
    def fulfilled(cls, source_id: str, count: int) -> SourceOutcome:
        return cls(source_id=source_id, status=OutcomeStatus.FULFILLED, count=count)

    @classmethod
    def failed(cls, source_id: str, message: str, kind: FailureKind) -> SourceOutcome:
        return cls(
            source_id=source_id,
            status=OutcomeStatus.FAILED,
            count=0,
            errors=(message,),
            error_kind=kind,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "sourceId": self.source_id,
            "status": self.status.value,
            "count": self.count,
            "errors": list(self.errors),
        }
        if self.error_kind is not None:
            result["errorKind"] = self.error_kind.value
        return result


@dataclass
class AggregatedSearch:
    """Merged, ranked and truncated page of results."""

    results: list[SearchResult]
    total: int
    per_source: list[SourceOutcome]
    query: str = ""
    sources: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "total": self.total,
            "sources": list(self.sources),
            "query": self.query,
            "perSource": [o.to_dict() for o in self.per_source],
        }
