"""
Async Utilities for Concurrent Source Calls.

Python 3.12+ features used:
- asyncio.TaskGroup for structured concurrency (3.11+)
- Type parameter syntax for generic functions

Provides:
- settle_all: run adapter calls side by side, keep every outcome
- timeout_with_fallback: bound a probe, substitute a value on timeout
- RateLimiter: per-provider quota as a token bucket
- CircuitBreaker: stop calling a provider that keeps failing
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .exceptions import CircuitOpenError

if TYPE_CHECKING:
    from legal_search.domain.entities import RateLimitPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Settle-all Execution with TaskGroup (Python 3.11+)
# =============================================================================

@dataclass(frozen=True)
class Settled(Generic[T]):
    """Outcome of one settled awaitable: either a value or the exception it raised."""
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(*coros: Awaitable[T]) -> list[Settled[T]]:
    """
    Run awaitables concurrently and wait for every one of them.

    Unlike a plain TaskGroup, one failing awaitable never cancels its
    siblings: each exception is captured into its own Settled entry.
    Results keep the order of the inputs, not completion order.

    Example:
        outcomes = await settle_all(fetch_a(), fetch_b())
        for outcome in outcomes:
            if outcome.ok:
                use(outcome.value)
    """
    settled: list[Settled[T] | None] = [None] * len(coros)

    async def run(index: int, coro: Awaitable[T]) -> None:
        try:
            settled[index] = Settled(value=await coro)
        except Exception as e:
            settled[index] = Settled(error=e)

    async with asyncio.TaskGroup() as tg:
        for i, coro in enumerate(coros):
            tg.create_task(run(i, coro))

    return [s for s in settled if s is not None]


async def timeout_with_fallback(
    coro: Awaitable[T],
    timeout: float,
    fallback: T | Callable[[], T],
) -> T:
    """
    Await `coro` for at most `timeout` seconds.

    On timeout the coroutine is cancelled and `fallback` is returned
    (called first when it is callable). Other exceptions propagate.
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError:
        return fallback() if callable(fallback) else fallback


# =============================================================================
# Provider Quota (Token Bucket)
# =============================================================================

@dataclass
class RateLimiter:
    """
    Token bucket holding a provider's published quota.

    The bucket starts full, so a burst up to `requests` goes out at once;
    after that callers wait for tokens to drip back at requests/period.

    Example:
        quota = RateLimiter.from_policy(RateLimitPolicy(5000, "hour"))
        async with quota:
            await client.get(...)
    """
    requests: float
    period: float = 1.0
    name: str = "quota"
    _available: float = field(init=False)
    _refilled_at: float = field(init=False)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        self._available = self.requests
        self._refilled_at = time.monotonic()

    @classmethod
    def from_policy(cls, policy: RateLimitPolicy, name: str = "quota") -> RateLimiter:
        return cls(requests=float(policy.requests), period=policy.period_seconds, name=name)

    @property
    def seconds_per_token(self) -> float:
        return self.period / self.requests

    def _refill(self) -> None:
        now = time.monotonic()
        gained = (now - self._refilled_at) / self.seconds_per_token
        self._available = min(self.requests, self._available + gained)
        self._refilled_at = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        async with self._lock:
            self._refill()
            if self._available < 1:
                delay = (1 - self._available) * self.seconds_per_token
                logger.debug(f"{self.name}: quota exhausted, waiting {delay:.2f}s")
                await asyncio.sleep(delay)
                self._refill()
            self._available -= 1

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


# =============================================================================
# Circuit Breaker Pattern
# =============================================================================

class BreakerState(Enum):
    CLOSED = "closed"        # requests flow
    OPEN = "open"            # provider skipped until recovery_timeout passes
    HALF_OPEN = "half_open"  # a few trial requests decide


@dataclass
class CircuitBreaker:
    """
    Circuit breaker guarding one provider.

    After `failure_threshold` failures in a row the provider is skipped for
    `recovery_timeout` seconds; callers get CircuitOpenError immediately,
    with the remaining wait as `retry_after`. Then up to
    `half_open_max_calls` trial requests are let through: one success
    closes the circuit, one failure reopens it.

    Example:
        breaker = CircuitBreaker(name="CourtListener", source_id="court_listener")

        async with breaker:
            response = await client.get(url)
    """
    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    half_open_max_calls: int = 3
    name: str = "circuit"
    source_id: str | None = None

    _state: BreakerState = field(init=False, default=BreakerState.CLOSED)
    _consecutive_failures: int = field(init=False, default=0)
    _opened_at: float = field(init=False, default=0.0)
    _trial_calls: int = field(init=False, default=0)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    @property
    def state(self) -> BreakerState:
        return self._state

    def _remaining(self) -> float:
        return max(0.0, self.recovery_timeout - (time.monotonic() - self._opened_at))

    def _reject(self, reason: str, retry_after: float) -> CircuitOpenError:
        return CircuitOpenError(
            f"{self.name} {reason}",
            retry_after=round(retry_after, 1),
            source_id=self.source_id,
        )

    async def __aenter__(self) -> CircuitBreaker:
        async with self._lock:
            if self._state is BreakerState.OPEN:
                remaining = self._remaining()
                if remaining > 0:
                    raise self._reject("temporarily disabled after repeated failures", remaining)
                self._state = BreakerState.HALF_OPEN
                self._trial_calls = 0
                logger.info(f"{self.name}: circuit half-open, sending trial request")

            if self._state is BreakerState.HALF_OPEN:
                if self._trial_calls >= self.half_open_max_calls:
                    raise self._reject("is still recovering", self.recovery_timeout / 2)
                self._trial_calls += 1

        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        async with self._lock:
            if exc_val is None:
                self._record_success()
            else:
                self._record_failure()

    def _record_success(self) -> None:
        if self._state is BreakerState.HALF_OPEN:
            logger.info(f"{self.name}: circuit closed (recovered)")
        self._state = BreakerState.CLOSED
        self._consecutive_failures = 0

    def _record_failure(self) -> None:
        self._consecutive_failures += 1
        reopen = self._state is BreakerState.HALF_OPEN
        if reopen or self._consecutive_failures >= self.failure_threshold:
            self._state = BreakerState.OPEN
            self._opened_at = time.monotonic()
            logger.warning(
                f"{self.name}: circuit opened after {self._consecutive_failures} consecutive failures"
            )
