# ABOUTME: Thread-safe in-memory TTL cache for ISBN resolutions, positive and negative.
# ABOUTME: Negative (not-found) entries get a shorter TTL so later corrections show up.

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from folio.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


class _NotFound:
    """Sentinel type for a cached authoritative not-found."""

    _instance: "_NotFound | None" = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()

CachedValue = BookMetadata | _NotFound


@dataclass
class CacheEntry:
    """A cached resolution keyed by normalized ISBN."""

    value: CachedValue
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at >= self.ttl


class ResolutionCache:
    """TTL map of normalized ISBN to BookMetadata or NOT_FOUND.

    When ``max_entries`` is reached, expired entries are purged first and
    then the oldest insertion is evicted.
    """

    def __init__(
        self,
        *,
        ttl: float = 24 * 60 * 60,
        negative_ttl: float = 10 * 60,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.negative_ttl = negative_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, isbn: str) -> CachedValue | None:
        """Return the live cached value, or None on a miss or expiry."""
        with self._lock:
            entry = self._entries.get(isbn)
            if entry is not None and entry.is_expired(self._clock()):
                del self._entries[isbn]
                entry = None
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            logger.debug("Cache hit for %s", isbn)
            return entry.value

    def set(self, isbn: str, value: CachedValue) -> None:
        ttl = self.negative_ttl if value is NOT_FOUND else self.ttl
        with self._lock:
            now = self._clock()
            self._entries.pop(isbn, None)
            if len(self._entries) >= self.max_entries:
                self._purge_expired(now)
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
            self._entries[isbn] = CacheEntry(value=value, stored_at=now, ttl=ttl)

    def clear(self, isbn: str | None = None) -> int:
        """Drop one entry or all entries; returns how many were removed."""
        with self._lock:
            if isbn is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed
            return 1 if self._entries.pop(isbn, None) is not None else 0

    def stats(self) -> dict[str, Any]:
        with self._lock:
            now = self._clock()
            live = [e for e in self._entries.values() if not e.is_expired(now)]
            lookups = self._hits + self._misses
            return {
                "size": len(live),
                "positiveEntries": sum(1 for e in live if e.value is not NOT_FOUND),
                "negativeEntries": sum(1 for e in live if e.value is NOT_FOUND),
                "hits": self._hits,
                "misses": self._misses,
                "hitRate": round(self._hits / lookups, 4) if lookups else 0.0,
                "ttlSeconds": self.ttl,
                "negativeTtlSeconds": self.negative_ttl,
                "maxEntries": self.max_entries,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        for key in [k for k, e in self._entries.items() if e.is_expired(now)]:
            del self._entries[key]
