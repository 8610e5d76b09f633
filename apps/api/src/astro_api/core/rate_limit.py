"""
Rate Limiting Module

Per-client request limiting for the public application endpoint.

Each key gets a window that opens on its first request and closes exactly
``window_seconds`` later; the count resets in one step when the window
closes (no partial decay). Counters live in process memory, so limits are
not shared between multiple server processes.

The limiter is an explicit object created in the application lifespan and
kept on ``app.state``; tests build their own instance with a fake clock.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single hit against the limiter."""

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int


@dataclass
class _Window:
    started_at: float
    count: int


class SlidingWindowRateLimiter:
    """
    In-memory request counter keyed by client identity.

    Args:
        limit: Maximum requests accepted per key inside one window
        window_seconds: Window length in seconds
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str) -> RateLimitDecision:
        """
        Count one request for ``key`` and decide whether it may proceed.

        Increment and check happen under one lock, so two concurrent
        requests from the same key can never both take the last slot.
        """
        async with self._lock:
            now = self._clock()
            window = self._windows.get(key)
            if window is None or now >= window.started_at + self.window_seconds:
                window = _Window(started_at=now, count=0)
                self._windows[key] = window

            window.count += 1
            remaining_time = window.started_at + self.window_seconds - now

            if window.count > self.limit:
                return RateLimitDecision(
                    allowed=False,
                    limit=self.limit,
                    remaining=0,
                    retry_after_seconds=max(1, math.ceil(remaining_time)),
                )

            return RateLimitDecision(
                allowed=True,
                limit=self.limit,
                remaining=self.limit - window.count,
                retry_after_seconds=0,
            )

    async def prune(self) -> int:
        """Drop windows that have closed. Returns the number removed."""
        async with self._lock:
            now = self._clock()
            expired = [
                key
                for key, window in self._windows.items()
                if now >= window.started_at + self.window_seconds
            ]
            for key in expired:
                del self._windows[key]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired rate limit windows")
        return len(expired)

    async def reset(self) -> None:
        """Forget every counter."""
        async with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


def client_identity(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Identify the caller for rate limiting.

    Uses the socket peer address. With ``trust_proxy_headers`` set (the app
    sits behind a reverse proxy that overwrites these headers) the
    left-most X-Forwarded-For entry wins, then X-Real-IP.
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        real_ip = request.headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()
    return request.client.host if request.client else "unknown"


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    """FastAPI dependency returning the limiter created at startup."""
    return request.app.state.rate_limiter


__all__ = [
    "RateLimitDecision",
    "SlidingWindowRateLimiter",
    "client_identity",
    "get_rate_limiter",
]
