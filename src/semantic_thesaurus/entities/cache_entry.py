"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntryEntity:
    """Domain entity for a single TTL cache slot.

    Entries are never mutated in place except for ``hit_count``.

    Attributes:
        key: Structured key, ``operation:subject[:qualifier]*``
        value: Opaque payload
        created_at: Clock reading when the entry was written
        ttl_seconds: Lifetime; the entry is dead once ``now > created_at + ttl_seconds``
        size_bytes: Rough memory footprint recorded at write time
        hit_count: Successful reads of this entry
    """

    key: str
    value: Any
    created_at: float
    ttl_seconds: float
    size_bytes: int = 0
    hit_count: int = 0

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl_seconds

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at
