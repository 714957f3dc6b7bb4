"""Per-route timetable cache carried on the route records themselves."""

from datetime import datetime, timedelta
from typing import List, Optional

from ..config import settings
from ..models.route import CacheSnapshot, Route


def is_fresh(snapshot: Optional[CacheSnapshot], now: datetime, ttl: timedelta) -> bool:
    """True when ``snapshot`` exists and was captured less than ``ttl`` before ``now``."""
    if snapshot is None:
        return False
    return snapshot.age(now) < ttl


class CacheService:
    """TTL policy for the snapshots attached to routes.

    No storage of its own: snapshots live on :class:`Route` and are persisted
    together with the route registry.
    """

    def __init__(self, ttl: Optional[int] = None):
        """
        Args:
            ttl: Time to live in seconds (default: ``settings.cache_ttl_seconds``)
        """
        seconds = settings.cache_ttl_seconds if ttl is None else ttl
        self.ttl = timedelta(seconds=seconds)

    def get(self, route: Route, now: datetime) -> Optional[CacheSnapshot]:
        """Return the route's snapshot if it is still fresh."""
        if is_fresh(route.cache, now, self.ttl):
            return route.cache
        return None

    def set(self, route: Route, times: List[str], now: datetime) -> CacheSnapshot:
        """Replace the route's snapshot wholesale."""
        route.cache = CacheSnapshot.capture(times, now)
        return route.cache

    def delete(self, route: Route) -> None:
        """Drop the snapshot regardless of its age."""
        route.clear_cache()

    def age_ms(self, snapshot: CacheSnapshot, now: datetime) -> int:
        return int(snapshot.age(now) / timedelta(milliseconds=1))
