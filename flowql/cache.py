"""Best-effort result cache keyed by normalised URL.

The cache is advisory: a miss never blocks progress and concurrent runs for
the same URL may each recompute.  The orchestrator takes a cache instance,
so tests run with :class:`NullCache` and the API keeps a :class:`TTLCache`.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple


class ResultCache(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or ``None`` on a miss."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*."""

    @abstractmethod
    def expire(self, key: str) -> None:
        """Drop *key* if present."""


class NullCache(ResultCache):
    """Never stores anything."""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any) -> None:
        return None

    def expire(self, key: str) -> None:
        return None


class TTLCache(ResultCache):
    """In-process cache whose entries expire ``ttl_sec`` seconds after ``set``.

    Expired entries are purged on every ``set``, and at most ``max_entries``
    are kept; the oldest entry is evicted first.
    """

    def __init__(
        self,
        ttl_sec: float = 3600,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl_sec
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._store: Dict[str, Tuple[float, Any]] = {}

    def _is_expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at > self.ttl

    def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._is_expired(stored_at, self._clock()):
            self._store.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        for stale in [k for k, (at, _) in self._store.items() if self._is_expired(at, now)]:
            del self._store[stale]
        # Re-setting a key moves it to the newest position.
        self._store.pop(key, None)
        while len(self._store) >= self.max_entries:
            del self._store[next(iter(self._store))]
        self._store[key] = (now, value)

    def expire(self, key: str) -> None:
        self._store.pop(key, None)

    def __len__(self) -> int:
        return len(self._store)
