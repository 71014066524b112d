"""In-process cache of serialized dependency trees."""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str]


@dataclass
class _CacheEntry:
    payload: bytes
    stored_at: float

    def is_expired(self, now: float, ttl: Optional[float]) -> bool:
        return ttl is not None and now - self.stored_at >= ttl


class ResponseCache:
    """Maps a literal (name, constraint) request to its serialized response.

    Safe to share between request handlers. Without limits the cache grows
    for the lifetime of the process; ``max_entries`` evicts the least
    recently used entry and ``ttl_seconds`` expires entries by age.

    Attributes:
        max_entries: Optional bound on the number of entries.
        ttl_seconds: Optional lifetime of an entry.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of entries, unbounded if None.
            ttl_seconds: Entry lifetime in seconds, no expiry if None.
            clock: Monotonic time source, replaceable in tests.
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, _CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: CacheKey) -> Optional[bytes]:
        """Return the cached payload for a (name, constraint) key, or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.is_expired(self._clock(), self.ttl_seconds):
                del self._entries[key]
                self.misses += 1
                logger.debug("Expired cache entry for %s@%s", *key)
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return entry.payload

    def put(self, key: CacheKey, payload: bytes) -> None:
        """Store a payload, evicting the least recently used entry if full."""
        with self._lock:
            self._entries[key] = _CacheEntry(payload=payload, stored_at=self._clock())
            self._entries.move_to_end(key)
            if self.max_entries is None:
                return
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self.evictions += 1
                logger.debug("Evicted cache entry for %s@%s", *evicted)

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def stats(self) -> dict:
        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
