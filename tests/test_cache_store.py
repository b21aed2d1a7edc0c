"""
Tests for the in-process TTL cache store.
"""

from semantic_thesaurus.protocols import CacheStore
from semantic_thesaurus.repositories import TTLCacheStore


def test_satisfies_protocol(cache):
    assert isinstance(cache, CacheStore)


def test_ttl_hit_then_miss(cache, clock):
    """Entry is live at half its TTL and gone after it."""
    cache.set("definition:happy:pos=any", "glad", ttl=1)

    clock.advance(0.5)
    assert cache.get("definition:happy:pos=any") == "glad"

    clock.advance(1.0)
    assert cache.get("definition:happy:pos=any") is None


def test_expiry_boundary(cache, clock):
    """Live at exactly created_at + ttl, dead one millisecond later."""
    cache.set("k", "v", ttl=1)
    clock.advance(1.0)
    assert cache.get("k") == "v"
    clock.advance(0.001)
    assert cache.get("k") is None


def test_expired_entry_not_returned_before_sweep(cache, clock):
    cache.set("k", "v", ttl=10)
    clock.advance(11)
    assert not cache.has("k")
    assert cache.keys() == []
    assert cache.get("k") is None


def test_last_write_wins(cache):
    assert cache.set("analysis:foo:noctx", "first")
    assert cache.set("analysis:foo:noctx", "second")

    assert cache.get("analysis:foo:noctx") == "second"
    assert cache.stats()["live_key_count"] == 1


def test_hits_and_misses_counted(cache, clock):
    cache.set("k", "v", ttl=5)
    cache.get("k")
    cache.get("missing")
    clock.advance(6)
    cache.get("k")  # expired but present: a miss

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 2
    assert stats["hit_rate"] == 1 / 3


def test_default_ttl_used(clock):
    store = TTLCacheStore(default_ttl=20, max_keys=10, clock=clock)
    store.set("k", "v")
    assert store.ttl_remaining("k") == 20
    clock.advance(21)
    assert store.ttl_remaining("k") is None


def test_non_positive_ttl_rejected(cache):
    assert cache.set("k", "v", ttl=0) is False
    assert cache.get("k") is None


def test_delete(cache):
    cache.set("k", "v")
    assert cache.delete("k") == 1
    assert cache.delete("k") == 0


def test_delete_matching_pattern(cache):
    """Only keys matching the pattern are removed."""
    cache.set("analysis:foo:x", 1)
    cache.set("analysis:foo:y", 2)
    cache.set("embedding:m:z", 3)

    assert cache.delete_matching("^analysis:foo") == 2

    assert cache.keys() == ["embedding:m:z"]


def test_delete_matching_invalid_regex_is_literal(cache):
    cache.set("synonyms:a(b:noctx", 1)
    cache.set("synonyms:ab:noctx", 2)

    assert cache.delete_matching("a(b") == 1
    assert cache.has("synonyms:ab:noctx")


def test_eviction_fifo_by_last_write(clock):
    store = TTLCacheStore(default_ttl=100, max_keys=2, clock=clock)
    store.set("a", 1)
    store.set("b", 2)
    store.set("a", 10)  # rewrite moves "a" behind "b"
    store.set("c", 3)

    assert not store.has("b")
    assert store.get("a") == 10
    assert store.get("c") == 3
    assert len(store) == 2


def test_eviction_sweeps_expired_first(clock):
    store = TTLCacheStore(default_ttl=100, max_keys=2, clock=clock)
    store.set("short", 1, ttl=1)
    store.set("long", 2)
    clock.advance(2)
    store.set("new", 3)

    assert store.has("long")
    assert store.has("new")


def test_flush_keeps_counters(cache):
    cache.set("k", "v")
    cache.get("k")
    cache.get("nope")

    cache.flush()

    stats = cache.stats()
    assert stats["live_key_count"] == 0
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_sweep_expired(cache, clock):
    cache.set("old", 1, ttl=1)
    cache.set("fresh", 2, ttl=100)
    clock.advance(5)

    assert cache.sweep_expired() == 1
    assert cache.keys() == ["fresh"]


def test_hit_count_tracked(cache):
    cache.set("k", "v")
    cache.get("k")
    cache.get("k")
    assert cache._entries["k"].hit_count == 2


def test_stats_size_estimate(cache):
    cache.set("k", "some value")
    assert cache.stats()["approx_size_bytes"] > 0
