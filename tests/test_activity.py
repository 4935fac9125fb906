import pytest

from spacesvm.activity import ActivityCache


def test_recent_is_newest_first():
    cache = ActivityCache(5)
    for item in ("claim", "set", "lifeline"):
        cache.record(item)
    assert cache.recent() == ["lifeline", "set", "claim"]


def test_empty_cache_has_no_activity():
    assert ActivityCache(4).recent() == []


def test_oldest_entries_are_displaced():
    cache = ActivityCache(2)
    for item in ("claim", "set", "move"):
        cache.record(item)
    assert cache.recent() == ["move", "set"]


def test_size_zero_keeps_nothing():
    cache = ActivityCache(0)
    cache.record("claim")
    assert cache.recent() == []


def test_length_never_exceeds_size():
    cache = ActivityCache(3)
    for n in range(10):
        cache.record(n)
        assert len(cache.recent()) == min(n + 1, 3)


def test_recent_returns_a_copy():
    cache = ActivityCache(3)
    cache.record("claim")
    snapshot = cache.recent()
    snapshot.append("extra")
    assert cache.recent() == ["claim"]


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        ActivityCache(-1)