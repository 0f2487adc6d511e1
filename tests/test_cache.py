"""
Tests for the byte-bounded LRU icon cache.
"""

import threading

import pytest

from iconapi.icons.cache import IconCache
from iconapi.icons.models import Icon


def icon_of(size):
    return Icon(data=b"x" * size, content_type="image/png")


class TestIconCache:

    def test_miss_then_hit(self):
        cache = IconCache(100)
        assert cache.get("a") is None
        icon = icon_of(10)
        cache.put("a", icon)
        assert cache.get("a") is icon
        assert cache.size == 10

    def test_evicts_least_recently_used(self):
        cache = IconCache(100)
        cache.put("a", icon_of(40))
        cache.put("b", icon_of(40))
        # Touch a so b becomes the eviction candidate.
        assert cache.get("a") is not None
        cache.put("c", icon_of(40))
        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert cache.size == 80

    def test_evicts_oldest_without_access(self):
        cache = IconCache(100)
        cache.put("a", icon_of(40))
        cache.put("b", icon_of(40))
        cache.put("c", icon_of(40))
        assert "a" not in cache
        assert len(cache) == 2

    def test_evicts_several_entries_for_large_icon(self):
        cache = IconCache(100)
        for key in "abcd":
            cache.put(key, icon_of(25))
        cache.put("big", icon_of(90))
        assert len(cache) == 1
        assert cache.size == 90

    def test_replacing_key_updates_size(self):
        cache = IconCache(100)
        cache.put("a", icon_of(60))
        cache.put("a", icon_of(30))
        assert cache.size == 30
        assert len(cache) == 1

    def test_oversized_icon_not_cached(self):
        cache = IconCache(100)
        cache.put("a", icon_of(50))
        assert cache.put("huge", icon_of(101)) is False
        assert "huge" not in cache
        assert "a" in cache

    def test_clear(self):
        cache = IconCache(100)
        cache.put("a", icon_of(10))
        cache.clear()
        assert len(cache) == 0
        assert cache.size == 0

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError):
            IconCache(-1)

    def test_concurrent_puts_respect_capacity(self):
        cache = IconCache(1000)

        def worker(n):
            for i in range(200):
                cache.put(f"{n}-{i}", icon_of(7))
                cache.get(f"{n}-{i // 2}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert cache.size <= 1000
        assert cache.size == 7 * len(cache)
