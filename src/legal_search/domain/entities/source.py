"""
Source Entities - Static description of an external legal-data provider.

Key Entities:
    - SourceDescriptor: Identity, access model and coverage of one provider
    - SourceCoverage: Jurisdictions, date range and document types covered
    - RateLimitPolicy: Published request quota of the provider
    - AccessType: How the provider is accessed (free, subscription, API key)

Descriptors are immutable: they are class-level constants on each adapter
and are never mutated at runtime (the status checker only observes).

Example:
    >>> descriptor = SourceDescriptor(
    ...     id="court_listener",
    ...     name="CourtListener",
    ...     access_type=AccessType.FREE,
    ...     base_url="https://www.courtlistener.com/api/rest/v4",
    ... )
    >>> descriptor.to_dict()["accessType"]
    'free'
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class AccessType(Enum):
    """How a provider grants access."""

    FREE = "free"
    SUBSCRIPTION = "subscription"
    API_KEY = "api_key"


_PERIOD_SECONDS = {
    "second": 1.0,
    "minute": 60.0,
    "hour": 3600.0,
    "day": 86400.0,
    "month": 2592000.0,
}


@dataclass(frozen=True)
class RateLimitPolicy:
    """
    Published request quota, e.g. 5000 requests per hour.

    Attributes:
        requests: Number of requests allowed per period
        period: One of second, minute, hour, day, month
    """

    requests: int
    period: str = "hour"

    def __post_init__(self) -> None:
        if self.period not in _PERIOD_SECONDS:
            raise ValueError(f"Unknown rate limit period: {self.period!r}")
        if self.requests < 1:
            raise ValueError("Rate limit requests must be positive")

    @property
    def period_seconds(self) -> float:
        return _PERIOD_SECONDS[self.period]

    @property
    def min_interval(self) -> float:
        """Seconds to wait between consecutive requests to stay within quota."""
        return self.period_seconds / self.requests

    def to_dict(self) -> dict[str, Any]:
        return {"requests": self.requests, "period": self.period}


@dataclass(frozen=True)
class SourceCoverage:
    """What a provider covers."""

    jurisdictions: tuple[str, ...] = ()
    date_range: str = ""
    document_types: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "jurisdictions": list(self.jurisdictions),
            "dateRange": self.date_range,
            "documentTypes": list(self.document_types),
        }


@dataclass(frozen=True)
class SourceDescriptor:
    """
    Static description of a provider.

    Attributes:
        id: Stable identifier used in requests (e.g. "court_listener")
        name: Display name, also stamped on every SearchResult.source
        access_type: Free, subscription or API key
        base_url: Root URL requests are built from
        rate_limit: Published quota, when the provider has one
        coverage: Jurisdictions, date range and document types
        is_active: Inactive sources are skipped by the aggregator
        description: One-line human description
    """

    id: str
    name: str
    access_type: AccessType
    base_url: str
    rate_limit: RateLimitPolicy | None = None
    coverage: SourceCoverage = field(default_factory=SourceCoverage)
    is_active: bool = True
    description: str = ""

    def deactivated(self) -> SourceDescriptor:
        """Return a copy marked inactive."""
        return replace(self, is_active=False)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "accessType": self.access_type.value,
            "baseUrl": self.base_url,
            "coverage": self.coverage.to_dict(),
            "isActive": self.is_active,
        }
        if self.rate_limit is not None:
            result["rateLimit"] = self.rate_limit.to_dict()
        if self.description:
            result["description"] = self.description
        return result
