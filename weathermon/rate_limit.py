"""Per-client request limits for the /api routes (fixed window)."""
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Protocol, Tuple

import redis

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="rate_limit")

DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 15 * 60


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int


class RateLimiter(Protocol):
    """Counts one hit for `client` and says whether it is within the limit."""

    def hit(self, client: str) -> RateLimitResult:
        ...


def _result(count: int, limit: int, retry_after: float) -> RateLimitResult:
    return RateLimitResult(
        allowed=count <= limit,
        limit=limit,
        remaining=max(limit - count, 0),
        retry_after_seconds=max(int(math.ceil(retry_after)), 1),
    )


class InMemoryRateLimiter(RateLimiter):
    """Process-local counters; fine for a single worker or tests."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, client: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            started, count = self._windows.get(client, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[client] = (started, count)
        return _result(count, self.max_requests, started + self.window_seconds - now)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


class RedisRateLimiter(RateLimiter):
    """Counters shared across workers via INCR + EXPIRE.

    If Redis errors the request is let through; the limiter never takes
    the API down with it.
    """

    def __init__(
        self,
        client,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        prefix: str = "ratelimit:",
    ) -> None:
        self.client = client
        self.max_requests = max_requests
        self.window_seconds = int(window_seconds)
        self.prefix = prefix

    def hit(self, client: str) -> RateLimitResult:
        key = f"{self.prefix}{client}"
        try:
            count = int(self.client.incr(key))
            if count == 1:
                self.client.expire(key, self.window_seconds)
            ttl = self.client.ttl(key)
            if ttl is None or ttl < 0:
                # counter without expiry (e.g. EXPIRE lost); re-arm it
                self.client.expire(key, self.window_seconds)
                ttl = self.window_seconds
        except redis.RedisError as exc:
            logger.error("Rate limit check failed for %s: %s", client, exc)
            return RateLimitResult(True, self.max_requests, self.max_requests, 0)
        return _result(count, self.max_requests, ttl)


def build_rate_limiter(settings, redis_client=None) -> RateLimiter | None:
    """Pick a limiter from settings; None when limiting is switched off."""
    if not settings.rate_limit_enabled:
        logger.info("API rate limiting disabled")
        return None
    if redis_client is not None:
        return RedisRateLimiter(redis_client, settings.rate_limit_max_requests, settings.rate_limit_window_seconds)
    return InMemoryRateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)
