"""
Keyed expiry services - response cache and fixed-window rate limiter.

Both are owned by the process (created once at startup and injected),
never module globals, and take their time source as a constructor argument
so tests can drive them with a controllable clock.

Storage is a bounded cachetools.TLRUCache: expired entries are purged on
every write and the least recently used entry is evicted at maxsize, so
neither map grows with the number of distinct keys seen.
"""

import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cachetools import TLRUCache

Clock = Callable[[], float]

DEFAULT_MAXSIZE = 10_000


def _entry_expiry(key: str, entry: tuple[Any, float], now: float) -> float:
    return now + entry[1]


def _window_expiry(key: str, window: tuple[int, float], now: float) -> float:
    return window[1]


class ResponseCache:
    """In-memory cache with per-key expiry."""

    def __init__(self, clock: Clock = time.monotonic, maxsize: int = DEFAULT_MAXSIZE) -> None:
        self._entries = TLRUCache(maxsize, ttu=_entry_expiry, timer=clock)
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
        return None if entry is None else entry[0]

    def set(self, key: str, value: Any, ttl_seconds: float) -> Any:
        with self._lock:
            self._entries[key] = (value, ttl_seconds)
        return value

    def invalidate(self, pattern: str | None = None) -> int:
        """
        Drop entries whose key matches the regex pattern (all when None).

        Returns:
            Number of live entries removed
        """
        with self._lock:
            self._entries.expire()
            if pattern is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed

            regex = re.compile(pattern)
            doomed = [key for key in list(self._entries) if regex.search(key)]
            for key in doomed:
                self._entries.pop(key, None)
            return len(doomed)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int


class RateLimiter:
    """
    Fixed-window request counter per key.

    A window entry expires at its reset time and is evicted with the
    next write, so idle clients cost nothing once their window closes.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Clock = time.monotonic,
        maxsize: int = DEFAULT_MAXSIZE,
    ) -> None:
        self._limit = limit
        self._window = window_seconds
        self._clock = clock
        self._windows = TLRUCache(maxsize, ttu=_window_expiry, timer=clock)
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            self._windows.expire()
            return len(self._windows)

    def check(self, key: str) -> RateLimitDecision:
        """Count one request for key and decide whether it is allowed."""
        with self._lock:
            count, reset_at = self._windows.get(key, (0, self._clock() + self._window))
            count += 1
            self._windows[key] = (count, reset_at)

        if count > self._limit:
            return RateLimitDecision(allowed=False, remaining=0)
        return RateLimitDecision(allowed=True, remaining=self._limit - count)
