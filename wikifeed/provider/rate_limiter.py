"""Token-bucket rate limiter for concurrent Wikipedia requests."""

import asyncio
import time
from dataclasses import dataclass, field


@dataclass
class AsyncTokenBucket:
    """Token bucket rate limiter for asyncio callers.

    Tokens are replenished continuously at ``max_qps``. Refill and take
    run without an intervening await; all callers must share one event
    loop.

    Attributes:
        max_qps: Maximum requests per second.
        bucket_capacity: Maximum tokens in the bucket (burst capacity).
    """

    max_qps: float
    bucket_capacity: float = 0.0  # defaults to max_qps

    _tokens: float = field(init=False, default=0.0)
    _last_refill: float = field(init=False, default=0.0)
    _rate_limited_count: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        """Initialize the bucket full."""
        if self.bucket_capacity <= 0:
            self.bucket_capacity = self.max_qps
        self._tokens = self.bucket_capacity
        self._last_refill = time.monotonic()

    def _refill(self) -> None:
        """Refill tokens based on elapsed time."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.bucket_capacity, self._tokens + elapsed * self.max_qps)
        self._last_refill = now

    async def acquire(self, tokens: int = 1) -> None:
        """Wait until ``tokens`` are available and take them.

        Args:
            tokens: Number of tokens to acquire.
        """
        while True:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return
            wait_time = (tokens - self._tokens) / self.max_qps
            self._rate_limited_count += 1

            await asyncio.sleep(wait_time)

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take tokens if available without waiting.

        Args:
            tokens: Number of tokens to acquire.

        Returns:
            True if tokens were acquired.
        """
        self._refill()
        if self._tokens >= tokens:
            self._tokens -= tokens
            return True
        self._rate_limited_count += 1
        return False

    @property
    def rate_limited_count(self) -> int:
        """Get the number of times a caller had to wait."""
        return self._rate_limited_count
