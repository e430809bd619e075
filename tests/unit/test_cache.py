import pytest

from nonprofitsuite.utils import cache
from nonprofitsuite.utils.cache import Cache


class _Clock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now


def test_keys_are_namespaced_once():
    assert cache.prefix_key("donors_item_1") == "ns_donors_item_1"
    assert cache.prefix_key("ns_donors_item_1") == "ns_donors_item_1"
    assert cache.item_key("donors", 7) == "ns_donors_item_7"
    assert cache.stats_key("dashboard") == "ns_stats_dashboard"


def test_list_key_is_stable_across_argument_order():
    a = cache.list_key("donors", {"limit": 10, "order": "DESC"})
    b = cache.list_key("donors", {"order": "DESC", "limit": 10})
    assert a == b
    assert a.startswith("ns_donors_list_")
    assert a != cache.list_key("donors", {"limit": 20, "order": "DESC"})


def test_remember_calls_producer_once_until_expiry():
    clock = _Clock()
    c = Cache(clock=clock)
    calls = []

    def producer():
        calls.append(1)
        return {"n": len(calls)}

    assert c.remember("donors_item_1", producer, ttl=60) == {"n": 1}
    assert c.remember("donors_item_1", producer, ttl=60) == {"n": 1}
    clock.now += 61
    assert c.remember("donors_item_1", producer, ttl=60) == {"n": 2}
    assert len(calls) == 2


def test_cached_none_counts_as_hit():
    c = Cache(clock=_Clock())
    calls = []

    def producer():
        calls.append(1)
        return None

    assert c.remember("donors_item_9", producer) is None
    assert c.remember("donors_item_9", producer) is None
    assert len(calls) == 1


def test_producer_exception_is_not_cached():
    c = Cache(clock=_Clock())

    def boom():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        c.remember("donors_item_2", boom)
    assert c.remember("donors_item_2", lambda: "ok") == "ok"


def test_invalidate_module_clears_only_that_module(db):
    c = Cache(clock=_Clock())
    c.set(cache.list_key("donors", {"a": 1}), [1])
    c.set(cache.item_key("donors", 3), {"id": 3})
    c.set(cache.item_key("volunteers", 3), {"id": 3})

    assert c.invalidate_module("donors") == 2

    assert c.get(cache.item_key("donors", 3)) is None
    assert c.get(cache.list_key("donors", {"a": 1})) is None
    assert c.get(cache.item_key("volunteers", 3)) == {"id": 3}


def test_transient_store_round_trips_json(db):
    cache.set("treasury_balance_sheet_2026-01-01", {"total": 12.5}, store=cache.STORE_TRANSIENT)
    assert cache.get("treasury_balance_sheet_2026-01-01", store=cache.STORE_TRANSIENT) == {"total": 12.5}

    cache.invalidate_module("treasury")
    assert cache.get("treasury_balance_sheet_2026-01-01", store=cache.STORE_TRANSIENT) is None


def test_invalidate_related_drops_lists_item_and_stats():
    cache.set(cache.list_key("assets", {"x": 1}), ["a"])
    cache.set(cache.item_key("assets", 4), {"id": 4})
    cache.set(cache.stats_key("assets"), {"count": 1})

    assert cache.invalidate_related("assets", 4) >= 3
    assert cache.get(cache.item_key("assets", 4)) is None
    assert cache.get(cache.stats_key("assets")) is None


def test_unknown_store_is_rejected():
    with pytest.raises(ValueError):
        cache.get("x", store="redis")


def test_stats_report_counts(db):
    cache.set("donors_item_1", {"id": 1})
    stats = cache.get_stats()
    assert stats["object_count"] == 1
    assert stats["cache_group"] == "nonprofitsuite"
    assert stats["transient_size"].endswith("B")


def test_format_bytes():
    assert cache.format_bytes(512) == "512 B"
    assert cache.format_bytes(2048) == "2.00 KB"
    assert cache.format_bytes(3 * 1048576) == "3.00 MB"
