"""
Expiring Lookup Cache
=====================

In-memory key-value storage where every entry carries its own time-to-live.

Used for data that changes rarely but is slow to fetch:
- the JIRA project list (1 hour)
- JIRA user lookups by email (1 day)
- Slack sender profiles (1 day)

Design Notes:
- Expiry is lazy: an expired entry is dropped the next time it is read,
  nothing sweeps the store in the background
- There is no size limit and no invalidation API; the bot only ever caches
  a handful of keys
- A single lock guards the dictionary, so a reader never sees a half-written
  entry; concurrent puts to one key are last-write-wins
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class CacheEntry:
    """
    A single cached value.

    Attributes:
        key: The cache key
        value: The cached value
        expires_at: Clock reading (seconds) after which the entry is absent
    """
    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ExpiringCache:
    """
    Key-value store with per-entry expiry.

    Example:
        cache = ExpiringCache()

        cache.put("projects", projects, ttl_ms=3_600_000)
        cached = cache.get("projects")   # None once the hour is up

    Args:
        clock: Returns the current time in seconds. Defaults to
            time.monotonic; tests pass a fake clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """
        Return the cached value for `key`, or None if missing or expired.

        The lookup and the expiry check happen under one lock, so callers
        can use the returned value directly without reading the cache again.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: Any, ttl_ms: int) -> None:
        """
        Store `value` under `key` for `ttl_ms` milliseconds.

        Overwrites any existing entry and restarts its expiry window.
        """
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                expires_at=self._clock() + ttl_ms / 1000.0,
            )

    def __len__(self) -> int:
        """Number of stored entries, including ones that expired but were not read yet."""
        with self._lock:
            return len(self._entries)
