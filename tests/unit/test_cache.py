"""Unit tests for lifecycletracker.cache."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from lifecycletracker.cache import ResponseCache

if TYPE_CHECKING:
    from tests.conftest import FakeClock


class TestResponseCache:
    def test_set_and_get_fresh(self, clock: FakeClock) -> None:
        cache = ResponseCache(60, clock=clock)
        cache.set("/python", [{"cycle": "3.12"}])
        assert cache.get("/python") == [{"cycle": "3.12"}]

    def test_get_nonexistent_returns_none(self, clock: FakeClock) -> None:
        cache = ResponseCache(60, clock=clock)
        assert cache.get("/missing") is None

    def test_entry_fresh_just_before_ttl(self, clock: FakeClock) -> None:
        cache = ResponseCache(60, clock=clock)
        cache.set("/", ["python"])
        clock.advance(59.9)
        assert cache.get("/") == ["python"]

    def test_entry_expires_at_ttl(self, clock: FakeClock) -> None:
        cache = ResponseCache(60, clock=clock)
        cache.set("/", ["python"])
        clock.advance(60)
        assert cache.get("/") is None

    def test_expired_entry_kept_until_overwritten(self, clock: FakeClock) -> None:
        """Eviction is lazy: an expired entry still counts until replaced."""
        cache = ResponseCache(60, clock=clock)
        cache.set("/", ["python"])
        clock.advance(120)
        assert cache.get("/") is None
        assert cache.stats().size == 1

        cache.set("/", ["python", "nodejs"])
        assert cache.get("/") == ["python", "nodejs"]
        assert cache.stats().size == 1

    def test_overwrite_resets_expiry(self, clock: FakeClock) -> None:
        cache = ResponseCache(60, clock=clock)
        cache.set("/", ["v1"])
        clock.advance(50)
        cache.set("/", ["v2"])
        clock.advance(50)
        assert cache.get("/") == ["v2"]

    def test_zero_ttl_never_serves_hits(self, clock: FakeClock) -> None:
        cache = ResponseCache(0, clock=clock)
        cache.set("/", ["python"])
        assert cache.get("/") is None

    def test_negative_ttl_rejected(self) -> None:
        with pytest.raises(ValueError, match="ttl_seconds"):
            ResponseCache(-1)

    def test_clear(self, clock: FakeClock) -> None:
        cache = ResponseCache(60, clock=clock)
        cache.set("/", ["python"])
        cache.set("/python", [])
        cache.clear()
        assert cache.stats().size == 0
        assert cache.get("/") is None

    def test_stats_lists_keys_in_insertion_order(self, clock: FakeClock) -> None:
        cache = ResponseCache(60, clock=clock)
        cache.set("/python", [])
        cache.set("/", [])
        stats = cache.stats()
        assert stats.size == 2
        assert stats.keys == ["/python", "/"]

    def test_instances_do_not_share_entries(self, clock: FakeClock) -> None:
        first = ResponseCache(60, clock=clock)
        second = ResponseCache(600, clock=clock)
        first.set("/", ["python"])
        assert second.get("/") is None
