"""Attempt throttling for the credential endpoints."""

from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from threading import Lock
from typing import Callable, DefaultDict, Deque, Protocol

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class Throttle(Protocol):
    def allow(self, key: str) -> bool:
        """Record an attempt for ``key`` and return ``False`` once the budget is spent."""
        ...

    def reset(self, key: str) -> None:
        """Forget all recorded attempts for ``key``."""
        ...


class SlidingWindowThrottle:
    """Thread-safe in-process sliding window."""

    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise the attempt budget, window length, and per-key storage."""
        self._max_attempts = max_attempts
        self._window = window_seconds
        self._clock = clock
        self._attempts: DefaultDict[str, Deque[float]] = defaultdict(deque)
        self._lock = Lock()
        self._next_sweep = clock() + window_seconds

    def _sweep(self, now: float) -> None:
        """Drop every key whose newest attempt has left the window."""
        stale = [
            key for key, seen in self._attempts.items() if not seen or now - seen[-1] >= self._window
        ]
        for key in stale:
            del self._attempts[key]
        self._next_sweep = now + self._window

    def allow(self, key: str) -> bool:
        """Return ``True`` when the attempt is within the budget for ``key``."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            seen = self._attempts[key]
            while seen and now - seen[0] >= self._window:
                seen.popleft()
            if len(seen) >= self._max_attempts:
                return False
            seen.append(now)
            return True

    def reset(self, key: str) -> None:
        """Forget the attempts recorded for ``key``."""
        with self._lock:
            self._attempts.pop(key, None)


class RedisThrottle:
    """Fixed-window attempt counter shared by every process pointing at the same Redis."""

    def __init__(
        self,
        client: Redis,
        *,
        max_attempts: int,
        window_seconds: int,
        key_prefix: str = "throttle",
    ) -> None:
        """Store the Redis client, attempt budget, and key namespace."""
        self._client = client
        self._max_attempts = max_attempts
        self._window = window_seconds
        self._key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    def allow(self, key: str) -> bool:
        """Count an attempt for ``key`` in Redis and report whether it is within budget."""
        redis_key = self._key(key)
        pipe = self._client.pipeline()
        # NX keeps the window anchored at the first attempt; INCR preserves the TTL
        pipe.set(redis_key, 0, ex=self._window, nx=True)
        pipe.incr(redis_key)
        _, attempts = pipe.execute()
        return int(attempts) <= self._max_attempts

    def reset(self, key: str) -> None:
        """Delete the Redis counter for ``key``."""
        self._client.delete(self._key(key))


def build_throttle(
    *,
    backend: str,
    max_attempts: int,
    window_seconds: int,
    redis_url: str = "",
) -> Throttle:
    """Instantiate the configured throttle, falling back to memory when Redis is unreachable."""
    if backend == "redis" and redis_url:
        try:
            client = Redis.from_url(redis_url)
            client.ping()
            logger.info("auth throttle configured for redis backend at %s", redis_url)
            return RedisThrottle(client, max_attempts=max_attempts, window_seconds=window_seconds)
        except (RedisError, ValueError) as exc:
            logger.warning("redis throttle unavailable, falling back to in-memory: %s", exc)

    logger.info("auth throttle using in-memory backend")
    return SlidingWindowThrottle(max_attempts=max_attempts, window_seconds=window_seconds)
