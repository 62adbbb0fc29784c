"""
TTL cache for raw POI responses, keyed by rounded coordinates and intent.

The cache belongs to the caller of candidate acquisition. The filter pipeline
never reads or writes it.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Any

from .matching.types import Intent
from .metrics import cache_hits_total, cache_misses_total, cache_size

# three decimals is roughly a 100 m grid
COORD_PRECISION = 3


def make_cache_key(latitude: float, longitude: float, intent: Intent | str | None) -> str:
    return (
        f"{latitude:.{COORD_PRECISION}f}_{longitude:.{COORD_PRECISION}f}_"
        f"{Intent.parse(intent).value}"
    )


@dataclass(slots=True)
class CacheEntry:
    value: Any
    expires_at: float
    hits: int = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class PlacesCache:
    """In-process TTL cache with an injectable clock and explicit invalidation."""

    def __init__(
        self,
        name: str = "places",
        *,
        ttl_seconds: float = 600,
        max_entries: int = 512,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(now):
                del self._entries[key]
                entry = None
            if entry is None:
                self._misses += 1
                cache_misses_total.labels(cache_name=self.name).inc()
                return None
            entry.hits += 1
            self._hits += 1
            self._entries.move_to_end(key)
        cache_hits_total.labels(cache_name=self.name).inc()
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                self._evictions += 1
            size = len(self._entries)
        cache_size.labels(cache_name=self.name).set(size)

    def invalidate(self, key: str | None = None) -> int:
        """Drop one key, or every entry when ``key`` is None. Returns entries removed."""
        with self._lock:
            if key is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                removed = 1 if self._entries.pop(key, None) is not None else 0
            size = len(self._entries)
        cache_size.labels(cache_name=self.name).set(size)
        return removed

    def stats(self) -> dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "name": self.name,
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": round(self._hits / total * 100, 1) if total else 0.0,
                "ttl_seconds": self.ttl_seconds,
            }
