# anime_filler/services/cache.py

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from ..config import CACHE_EXPIRY_HOURS

CACHE_EXPIRY_SECONDS = CACHE_EXPIRY_HOURS * 3600


def is_expired(stored_at: float, now: float, expiry: float) -> bool:
    """Whether an entry stored at ``stored_at`` is too old at ``now``."""
    return now - stored_at >= expiry


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    stored_at: float


class TimedCache:
    """
    Process-wide cache whose entries expire a fixed time after being stored.

    Expired entries are not evicted on read: ``peek`` still returns them so
    callers can fall back to stale data when a refresh fails.
    """

    MISS = object()

    def __init__(
        self,
        *,
        expiry: float = CACHE_EXPIRY_SECONDS,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.expiry = expiry
        self._clock = clock or time.monotonic
        self._entries: dict[Hashable, _CacheEntry] = {}
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def get(self, key: Hashable) -> Any:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or is_expired(entry.stored_at, self._clock(), self.expiry):
            return TimedCache.MISS
        return entry.value

    def peek(self, key: Hashable) -> Any:
        with self._lock:
            entry = self._entries.get(key)
        return TimedCache.MISS if entry is None else entry.value

    def stored_at(self, key: Hashable) -> float | None:
        with self._lock:
            entry = self._entries.get(key)
        return None if entry is None else entry.stored_at

    def set(self, key: Hashable, value: Any) -> None:
        now = self._clock()
        with self._lock:
            previous = self._entries.get(key)
            # Timestamps per key never move backwards, even with a skewed clock.
            if previous is not None and previous.stored_at > now:
                now = previous.stored_at
            self._entries[key] = _CacheEntry(value=value, stored_at=now)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:  # pragma: no cover - convenience
        with self._lock:
            return len(self._entries)
