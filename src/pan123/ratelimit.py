"""Client-side token-bucket admission control."""

from __future__ import annotations

import inspect
import logging
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import anyio

from ._http.config import RateLimitConfig
from .errors import RateLimitError

SleepFn = Callable[[float], Awaitable[None] | None]


@dataclass(frozen=True, slots=True)
class RateLimiterStatus:
    available_tokens: int
    capacity: int
    refill_rate_per_ms: float
    max_retries: int


class TokenBucketRateLimiter:
    """Lazily refilled token bucket shared by every request of one client.

    No background timer: each ``check_limit()`` first credits the tokens
    accrued since the previous check, then debits one. Refill and debit run
    without an await in between, so concurrent tasks never observe a
    half-updated bucket.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        sleep_fn: SleepFn = anyio.sleep,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        config = config or RateLimitConfig()
        self.capacity = config.max_requests
        self.refill_rate_per_ms = config.max_requests / config.per_milliseconds
        self.max_retries = config.max_retries
        self._tokens = float(self.capacity)
        self._sleep_fn = sleep_fn
        self._clock = clock
        self._last_refill = clock()
        self._logger = logger or logging.getLogger("pan123.ratelimit")

    def _refill(self) -> None:
        now = self._clock()
        elapsed_ms = max(0.0, (now - self._last_refill) * 1000)
        self._tokens = min(float(self.capacity), self._tokens + elapsed_ms * self.refill_rate_per_ms)
        self._last_refill = now

    def _try_acquire(self) -> bool:
        self._refill()
        if self._tokens >= 1:
            self._tokens -= 1
            return True
        return False

    @property
    def wait_ms(self) -> int:
        """Time needed to accrue one whole token from empty."""
        return math.ceil(1 / self.refill_rate_per_ms)

    async def check_limit(self) -> None:
        """Wait until a token is available, or raise RateLimitError.

        One immediate attempt plus up to ``max_retries`` retries, each retry
        preceded by a sleep of ``wait_ms``.
        """
        for attempt in range(self.max_retries + 1):
            if self._try_acquire():
                return
            if attempt == self.max_retries:
                break
            self._logger.debug(
                "rate limit bucket empty, waiting %d ms (retry %d/%d)",
                self.wait_ms,
                attempt + 1,
                self.max_retries,
            )
            result = self._sleep_fn(self.wait_ms / 1000)
            if inspect.isawaitable(result):
                await result

        raise RateLimitError(self.max_retries)

    def reset(self) -> None:
        self._tokens = float(self.capacity)
        self._last_refill = self._clock()

    @property
    def available_tokens(self) -> int:
        self._refill()
        return math.floor(self._tokens)

    def status(self) -> RateLimiterStatus:
        return RateLimiterStatus(
            available_tokens=self.available_tokens,
            capacity=self.capacity,
            refill_rate_per_ms=self.refill_rate_per_ms,
            max_retries=self.max_retries,
        )


__all__ = ["TokenBucketRateLimiter", "RateLimiterStatus", "SleepFn"]
