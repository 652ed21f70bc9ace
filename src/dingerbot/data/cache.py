"""In-process TTL cache for upstream API responses.

Entries live in memory only and expire ``ttl`` seconds after they were
stored. Used by the Feed Client so repeated calls inside one polling burst
are served without another round trip::

    cache = TTLCache(clock=time.monotonic)
    cache.set(("live_feed", 745123), snapshot, ttl=10)
    cache.get(("live_feed", 745123))      # -> snapshot until 10s elapse
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Hashable

_MISSING = object()


class TTLCache:
    """Thread-safe mapping of key -> (expires_at, value)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value, or ``default`` if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    def get_or_fetch(self, key: Hashable, fetch: Callable[[], Any], ttl: float) -> Any:
        """Return the cached value for ``key``, calling ``fetch`` on a miss.

        Exceptions from ``fetch`` propagate and nothing is stored.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = fetch()
        self.set(key, value, ttl)
        return value

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
