"""Tests for cache service."""

from datetime import datetime, timedelta, timezone

from ratbv.models.route import CacheSnapshot, Route
from ratbv.services.cache_service import CacheService, is_fresh

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
TTL = timedelta(minutes=5)


def _route(snapshot=None) -> Route:
    return Route(
        id="23b-1-dus",
        name="Linia 23B",
        station_name="Sala Sporturilor",
        url="https://www.ratbv.ro/afisaje/23b-dus/line_23b_1_cl1_ro.html",
        cache=snapshot,
    )


def test_missing_snapshot_is_stale():
    assert is_fresh(None, NOW, TTL) is False


def test_snapshot_within_ttl_is_fresh():
    snapshot = CacheSnapshot(times=["7:05"], captured_at=NOW - timedelta(minutes=4, seconds=59))

    assert is_fresh(snapshot, NOW, TTL) is True


def test_snapshot_at_ttl_is_stale():
    snapshot = CacheSnapshot(times=["7:05"], captured_at=NOW - TTL)

    assert is_fresh(snapshot, NOW, TTL) is False


def test_snapshot_from_the_future_counts_as_fresh():
    snapshot = CacheSnapshot(times=[], captured_at=NOW + timedelta(seconds=30))

    assert is_fresh(snapshot, NOW, TTL) is True
    assert snapshot.age(NOW) == timedelta(0)


def test_cache_set_and_get():
    """Test setting and getting a route's snapshot."""
    cache = CacheService(ttl=300)
    route = _route()

    cache.set(route, ["7:05", "7:20"], NOW)

    snapshot = cache.get(route, NOW + timedelta(seconds=10))
    assert snapshot is not None
    assert snapshot.times == ["7:05", "7:20"]
    assert cache.age_ms(snapshot, NOW + timedelta(seconds=10)) == 10_000


def test_cache_expiry():
    """Cached times are not served once the TTL has elapsed."""
    cache = CacheService(ttl=60)
    route = _route()
    cache.set(route, ["7:05"], NOW)

    assert cache.get(route, NOW + timedelta(seconds=61)) is None
    # The stale snapshot stays attached until it is replaced or invalidated.
    assert route.cache is not None


def test_cache_delete():
    """Deleting drops the snapshot whatever its age."""
    cache = CacheService(ttl=300)
    route = _route()
    cache.set(route, ["7:05"], NOW)

    cache.delete(route)

    assert route.cache is None
    assert cache.get(route, NOW) is None


def test_capture_truncates_to_milliseconds():
    snapshot = CacheSnapshot.capture(["7:05"], NOW.replace(microsecond=123456))

    assert snapshot.captured_at.microsecond == 123000
