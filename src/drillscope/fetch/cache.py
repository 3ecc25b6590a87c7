"""In-memory TTL cache for retrieval results.

One instance per consumer. Entries expire lazily: an expired entry is
evicted the next time it is read. There is no background sweeper.
"""

import logging
import threading
import time
from typing import Any, Callable, NamedTuple, Optional

__all__ = ['CacheEntry', 'FetchCache']

logger = logging.getLogger(__name__)


class CacheEntry(NamedTuple):
    """A cached value and the clock reading at which it was stored."""
    key: str
    value: Any
    timestamp: float


class FetchCache:
    """TTL-keyed value store.

    The TTL is fixed at construction. A value stored at time ``t`` is
    returned by :meth:`get` up to and including ``t + ttl_seconds`` and is
    absent afterwards. Last :meth:`set` wins; there is no cross-key locking,
    only a per-instance lock guarding the entry table.

    Reads never raise: a corrupt entry is evicted and reported as a miss.

    Parameters
    ----------
    ttl_seconds : float
        Time-to-live for every entry. Must be positive.
    clock : callable, optional
        Returns the current time in seconds. Defaults to ``time.monotonic``.
        Injectable for testing.
    name : str, optional
        Label used in log messages.

    Examples
    --------
    >>> cache = FetchCache(ttl_seconds=60)
    >>> cache.set("revenue:2024", [{"name": "Jan", "value": 10}])
    >>> cache.get("revenue:2024")
    [{'name': 'Jan', 'value': 10}]
    """

    def __init__(self, ttl_seconds: float, clock: Optional[Callable[[], float]] = None,
                 name: str = "cache"):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        self.ttl_seconds = float(ttl_seconds)
        self.name = name
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return default

            try:
                expired = self._is_expired(entry, self._clock())
            except (TypeError, AttributeError):
                logger.warning("%s: dropping corrupt entry %r", self.name, key)
                self._entries.pop(key, None)
                self.misses += 1
                return default

            if expired:
                del self._entries[key]
                self.misses += 1
                logger.debug("%s: expired %r", self.name, key)
                return default

            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        with self._lock:
            self._entries[key] = CacheEntry(key, value, self._clock())

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry. Hit/miss counters are kept."""
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Evict every expired entry now. Returns the number removed."""
        with self._lock:
            now = self._clock()
            stale = [k for k, e in self._entries.items() if self._is_expired(e, now)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("%s: purged %d expired entries", self.name, len(stale))
        return len(stale)

    def get_statistics(self) -> dict:
        """Entry count and hit/miss counters."""
        with self._lock:
            lookups = self.hits + self.misses
            return {
                "size": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": self.hits / lookups if lookups else 0.0,
            }

    def __contains__(self, key: str) -> bool:
        # membership does not count as a lookup
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            try:
                return not self._is_expired(entry, self._clock())
            except (TypeError, AttributeError):
                return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
