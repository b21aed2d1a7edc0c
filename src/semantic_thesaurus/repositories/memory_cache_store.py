"""In-process TTL cache store.

Satisfies the CacheStore protocol with an insertion-ordered dict guarded by a
single lock. Expiry is checked on every read; ``sweep_expired`` reclaims
memory in bulk and is run periodically by the API lifespan.

Eviction policy: FIFO by last write. When the store is full, expired entries
are swept first; if it is still full, the entry written longest ago is
dropped. Rewriting a key moves it to the back of the queue. Reads never
reorder entries.
"""

import logging
import re
import sys
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from semantic_thesaurus.config import settings
from semantic_thesaurus.entities import CacheEntryEntity

logger = logging.getLogger(__name__)


def _approx_size(key: str, value: Any) -> int:
    return sys.getsizeof(key) + len(repr(value).encode("utf-8", errors="replace"))


class TTLCacheStore:
    """Thread-safe in-memory TTL cache with a key-count bound.

    Example:
        ```python
        cache = TTLCacheStore.create(default_ttl=60)
        cache.set("definition:happy:any", "feeling pleasure")
        cache.get("definition:happy:any")  # -> "feeling pleasure"
        ```
    """

    def __init__(
        self,
        default_ttl: float | None = None,
        max_keys: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache store.

        Args:
            default_ttl: TTL used when ``set`` gets none. Defaults to settings.
            max_keys: Maximum number of entries. Defaults to settings.
            clock: Monotonic time source in seconds (injectable for tests).
        """
        self._default_ttl = default_ttl or settings.cache_ttl
        self._max_keys = max_keys or settings.cache_max_keys
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntryEntity] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @classmethod
    def create(
        cls,
        default_ttl: float | None = None,
        max_keys: int | None = None,
    ) -> "TTLCacheStore":
        """Factory method to create TTLCacheStore with defaults.

        Args:
            default_ttl: Default TTL in seconds. If None, uses settings.
            max_keys: Capacity. If None, uses settings.

        Returns:
            Configured TTLCacheStore
        """
        return cls(default_ttl=default_ttl, max_keys=max_keys)

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        ttl = self._default_ttl if ttl is None else ttl
        if ttl <= 0:
            logger.warning("Refusing cache write for %s: non-positive TTL %s", key, ttl)
            return False

        try:
            entry = CacheEntryEntity(
                key=key,
                value=value,
                created_at=self._clock(),
                ttl_seconds=ttl,
                size_bytes=_approx_size(key, value),
            )
            with self._lock:
                if key in self._entries:
                    del self._entries[key]
                elif len(self._entries) >= self._max_keys:
                    self._make_room(entry.created_at)
                self._entries[key] = entry
        except Exception:
            logger.exception("Error setting cache for key %s", key)
            return False

        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return True

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                logger.debug("Cache MISS: %s", key)
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug("Cache EXPIRED: %s", key)
                return None
            entry.hit_count += 1
            self._hits += 1
            value = entry.value

        logger.debug("Cache HIT: %s", key)
        return value

    def delete(self, key: str) -> int:
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is None:
                return 0
            removed = 0 if entry.is_expired(self._clock()) else 1

        logger.debug("Cache DELETE: %s", key)
        return removed

    def delete_matching(self, pattern: str) -> int:
        """Delete every live key matching ``pattern``.

        ``pattern`` is a regular expression searched anywhere in the key. A
        pattern that does not compile is matched as a literal substring.
        """
        try:
            regex = re.compile(pattern)
        except re.error:
            logger.info("Pattern %r is not a valid regex, matching it literally", pattern)
            regex = re.compile(re.escape(pattern))

        with self._lock:
            now = self._clock()
            removed = 0
            for key in list(self._entries):
                if not regex.search(key):
                    continue
                entry = self._entries.pop(key)
                if not entry.is_expired(now):
                    removed += 1

        logger.debug("Deleted %d cache entries matching pattern: %s", removed, pattern)
        return removed

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def keys(self) -> list[str]:
        with self._lock:
            now = self._clock()
            return [key for key, entry in self._entries.items() if not entry.is_expired(now)]

    def ttl_remaining(self, key: str) -> float | None:
        """Seconds until ``key`` expires, or None if it is not live."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            remaining = entry.expires_at - self._clock()
            return remaining if remaining >= 0 else None

    def sweep_expired(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries reclaimed
        """
        with self._lock:
            swept = self._sweep(self._clock())
        if swept:
            logger.debug("Swept %d expired cache entries", swept)
        return swept

    def stats(self) -> dict[str, Any]:
        with self._lock:
            now = self._clock()
            live = [entry for entry in self._entries.values() if not entry.is_expired(now)]
            hits, misses = self._hits, self._misses

        lookups = hits + misses
        return {
            "live_key_count": len(live),
            "hits": hits,
            "misses": misses,
            "hit_rate": hits / lookups if lookups else 0.0,
            "approx_size_bytes": sum(entry.size_bytes for entry in live),
            "max_keys": self._max_keys,
            "default_ttl": self._default_ttl,
        }

    def flush(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Cache FLUSHED")

    def _sweep(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _make_room(self, now: float) -> None:
        # Caller holds the lock.
        self._sweep(now)
        while len(self._entries) >= self._max_keys:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache EVICT: %s", evicted)

    @property
    def default_ttl(self) -> float:
        """Get the TTL applied when a write omits one."""
        return self._default_ttl

    def __len__(self) -> int:
        return len(self.keys())
