"""Cache storage protocol.

Defines the interface for the key/value store that sits in front of every
expensive model call. The default implementation is the in-process
TTLCacheStore; anything with the same methods (a Redis-backed store, for
example) satisfies the protocol.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for TTL key/value cache backends.

    Writes never raise: ``set`` reports failure by returning False, and callers
    treat that exactly like a miss.
    """

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Store a value.

        Args:
            key: The cache key
            value: Arbitrary payload, opaque to the store
            ttl: Lifetime in seconds. Uses the store default when omitted.

        Returns:
            True if stored, False if the write could not be admitted
        """
        ...

    def get(self, key: str) -> Any | None:
        """Return the live value for ``key`` or None.

        Logically expired entries are never returned, swept or not.
        """
        ...

    def delete(self, key: str) -> int:
        """Delete one key.

        Returns:
            Number of entries removed (0 or 1)
        """
        ...

    def delete_matching(self, pattern: str) -> int:
        """Delete every live key matching a regular expression.

        Returns:
            Number of entries removed
        """
        ...

    def has(self, key: str) -> bool:
        """Check whether a live entry exists for ``key``."""
        ...

    def keys(self) -> list[str]:
        """List all live keys."""
        ...

    def stats(self) -> dict[str, Any]:
        """Return live_key_count, hits, misses, hit_rate and approx_size_bytes."""
        ...

    def flush(self) -> None:
        """Remove every entry. Hit/miss counters are kept."""
        ...
