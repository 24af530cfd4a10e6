"""Shared utilities: exception hierarchy and async helpers."""

from .async_utils import BreakerState, CircuitBreaker, RateLimiter, Settled, settle_all, timeout_with_fallback
from .exceptions import (
    AdapterBlockedError,
    AdapterError,
    AdapterNetworkError,
    AdapterRateLimitedError,
    AdapterTimeoutError,
    AdapterUnauthorizedError,
    CircuitOpenError,
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    FailureKind,
    InternalAggregationError,
    InvalidRequestError,
    LegalSearchError,
    failure_kind_of,
)

__all__ = [
    "BreakerState",
    "CircuitBreaker",
    "RateLimiter",
    "Settled",
    "settle_all",
    "timeout_with_fallback",
    "LegalSearchError",
    "InvalidRequestError",
    "AdapterError",
    "AdapterUnauthorizedError",
    "AdapterRateLimitedError",
    "AdapterNetworkError",
    "AdapterTimeoutError",
    "AdapterBlockedError",
    "CircuitOpenError",
    "InternalAggregationError",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "FailureKind",
    "failure_kind_of",
]
