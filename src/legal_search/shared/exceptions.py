"""
Exception hierarchy for legal search.

    LegalSearchError (base)
    ├── InvalidRequestError
    ├── AdapterError
    │   ├── AdapterUnauthorizedError
    │   ├── AdapterRateLimitedError
    │   ├── AdapterNetworkError
    │   │   └── CircuitOpenError
    │   ├── AdapterTimeoutError
    │   └── AdapterBlockedError
    ├── InternalAggregationError
    └── ConfigurationError

Adapter errors never leave the aggregator: they are captured per source and
reported as failed outcomes. Only InvalidRequestError and
InternalAggregationError reach the HTTP boundary.

Severity, category and retryability are class attributes; subclasses
override them instead of threading them through __init__.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    WARNING = auto()      # caller mistake, fix and resend
    ERROR = auto()        # failed, may succeed later
    CRITICAL = auto()     # the request cannot be served
    TRANSIENT = auto()    # back off, then retry


class ErrorCategory(Enum):
    ADAPTER = "adapter"
    VALIDATION = "validation"
    AGGREGATION = "aggregation"
    CONFIGURATION = "config"


class FailureKind(str, Enum):
    """Closed set of reasons an adapter can fail."""
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    TIMEOUT = "timeout"
    BLOCKED = "blocked"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Where an error came from and what the caller can do about it."""
    source_id: str | None = None
    suggestion: str | None = None
    retry_after: float | None = None


class LegalSearchError(Exception):
    """Base exception for all legal search errors."""

    severity = ErrorSeverity.ERROR
    category = ErrorCategory.ADAPTER
    retryable = False

    def __init__(self, message: str, *, context: ErrorContext | None = None) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready summary, used in log records and error bodies."""
        body: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        ctx = self.context
        if ctx.source_id:
            body["source"] = ctx.source_id
        if ctx.suggestion:
            body["suggestion"] = ctx.suggestion
        if ctx.retry_after:
            body["retry_after_seconds"] = ctx.retry_after
        return body


# =============================================================================
# Request Errors
# =============================================================================

class InvalidRequestError(LegalSearchError):
    """Raised when a search request is malformed (empty query, no sources)."""

    severity = ErrorSeverity.WARNING
    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details


# =============================================================================
# Adapter Errors
# =============================================================================

class AdapterError(LegalSearchError):
    """
    Base class for failures raised by a single source adapter.

    Subclasses only pick a FailureKind plus their defaults; the aggregator
    turns any of them into a failed SourceOutcome carrying `kind`.
    """

    kind: FailureKind = FailureKind.NETWORK
    default_message = "Adapter request failed"
    retryable = True

    def __init__(
        self,
        message: str | None = None,
        *,
        source_id: str | None = None,
        retry_after: float | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(
            message or self.default_message,
            context=ErrorContext(source_id=source_id, suggestion=suggestion, retry_after=retry_after),
        )

    @property
    def source_id(self) -> str | None:
        return self.context.source_id


class AdapterUnauthorizedError(AdapterError):
    """Missing credential, or the provider answered 401/403."""

    kind = FailureKind.UNAUTHORIZED
    default_message = "Unauthorized"
    retryable = False


class AdapterRateLimitedError(AdapterError):
    """Provider answered 429. `retry_after` carries its hint, if any."""

    kind = FailureKind.RATE_LIMITED
    default_message = "Rate limit exceeded"
    severity = ErrorSeverity.TRANSIENT

    def __init__(
        self,
        message: str | None = None,
        *,
        retry_after: float | None = None,
        source_id: str | None = None,
    ) -> None:
        message = message or self.default_message
        if retry_after is not None:
            message = f"{message} (retry after {retry_after:g}s)"
        super().__init__(
            message,
            source_id=source_id,
            retry_after=retry_after,
            suggestion="Wait and retry the request",
        )
        self.retry_after = retry_after


class AdapterNetworkError(AdapterError):
    """Transport failure, 5xx, or a body we could not decode."""

    kind = FailureKind.NETWORK
    default_message = "Network connection failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        source_id: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, source_id=source_id, retry_after=retry_after)
        self.status_code = status_code


class CircuitOpenError(AdapterNetworkError):
    """The provider's circuit breaker is open; no request was sent."""

    default_message = "Circuit breaker is open"
    severity = ErrorSeverity.TRANSIENT


class AdapterTimeoutError(AdapterError):
    kind = FailureKind.TIMEOUT
    default_message = "Request timed out"
    severity = ErrorSeverity.TRANSIENT


class AdapterBlockedError(AdapterError):
    """A scraped site served a captcha or bot wall."""

    kind = FailureKind.BLOCKED
    default_message = "Access blocked by provider"
    retryable = False


# =============================================================================
# Aggregation / Configuration Errors
# =============================================================================

class InternalAggregationError(LegalSearchError):
    """Merging already-collected results failed. `details` holds the cause."""

    severity = ErrorSeverity.CRITICAL
    category = ErrorCategory.AGGREGATION

    def __init__(self, message: str = "Search failed", *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.details = str(cause) if cause is not None else None


class ConfigurationError(LegalSearchError):
    """Bad environment variable or settings value."""

    severity = ErrorSeverity.CRITICAL
    category = ErrorCategory.CONFIGURATION


def failure_kind_of(error: BaseException) -> FailureKind:
    """Classify any exception into the adapter failure taxonomy."""
    if isinstance(error, AdapterError):
        return error.kind
    if isinstance(error, TimeoutError):
        return FailureKind.TIMEOUT
    return FailureKind.NETWORK
