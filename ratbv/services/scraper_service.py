"""Entry point the API uses to reach the scrapers, the cache and the registry.

Playwright's sync API blocks, so every scrape runs in the event loop's
default executor with its own browser session. Requests for the same stale
route are not de-duplicated: each one launches a browser and writes the
cache, and the last write wins.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Callable, ContextManager, Dict, List, Optional, TypeVar
from zoneinfo import ZoneInfo

from ..config import Settings, settings as default_settings
from ..models.route import Direction, Route
from ..models.timetable import TimetableResult
from ..models.topology import LineTopology
from .browser import BrowserSession, open_browser_session
from .cache_service import CacheService
from .errors import InvalidRequestError, RouteNotFoundError, ScrapeFailure
from . import route_identity
from .route_identity import resolve_identity, route_from_station
from .route_registry import RouteRegistry
from .scrapers.line_metadata import extract_line_topology, extract_station_name
from .scrapers.timetable import extract_timetable, find_next_departure

logger = logging.getLogger(__name__)

T = TypeVar("T")

SessionFactory = Callable[[], ContextManager[BrowserSession]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScraperService:
    """Topology and timetable scraping with per-route caching."""

    def __init__(
        self,
        registry: Optional[RouteRegistry] = None,
        cache: Optional[CacheService] = None,
        session_factory: Optional[SessionFactory] = None,
        clock: Callable[[], datetime] = _utcnow,
        config: Optional[Settings] = None,
    ) -> None:
        self.config = config or default_settings
        self.registry = registry or RouteRegistry(self.config.routes_file)
        self.cache = cache or CacheService(self.config.cache_ttl_seconds)
        self._session_factory = session_factory or partial(open_browser_session, self.config)
        self._clock = clock
        self._timezone = ZoneInfo(self.config.timezone)

    # Scraping -------------------------------------------------------------------

    async def fetch_line_topology(self, master_url: str) -> LineTopology:
        """Scrape the ordered stations of one line direction. Never cached."""
        if not master_url or not master_url.strip():
            raise InvalidRequestError("URL is required")
        route_identity.parse_line_segment(master_url)
        return await self._run_scrape(extract_line_topology, master_url.strip())

    async def fetch_line_directions(self, line_number: str) -> Dict[Direction, LineTopology]:
        """Scrape both directions of a line.

        If the inbound page cannot be scraped, the outbound stations are
        reversed and returned flagged as ``reversed_fallback``. Their URLs
        still point at outbound timetables.
        """
        if not line_number or not line_number.strip():
            raise InvalidRequestError("Line number is required")
        base = self.config.ratbv_base_url
        outbound = await self.fetch_line_topology(
            route_identity.master_url(line_number, Direction.OUTBOUND, base)
        )
        inbound_url = route_identity.master_url(line_number, Direction.INBOUND, base)
        try:
            inbound = await self.fetch_line_topology(inbound_url)
        except ScrapeFailure as exc:
            logger.warning(
                "Inbound topology for line %s unavailable, using reversed outbound: %s",
                line_number,
                exc,
            )
            inbound = outbound.reversed_as(Direction.INBOUND, inbound_url)
        return {Direction.OUTBOUND: outbound, Direction.INBOUND: inbound}

    async def lookup_station_name(self, station_url: str) -> str:
        if not station_url or not station_url.strip():
            raise InvalidRequestError("URL is required")
        return await self._run_scrape(extract_station_name, station_url.strip())

    async def fetch_timetable(self, route: Route) -> TimetableResult:
        """Serve the route's times from cache when fresh, otherwise scrape them."""
        now = self._clock()
        snapshot = self.cache.get(route, now)
        if snapshot is not None:
            age_ms = self.cache.age_ms(snapshot, now)
            logger.info("Cache hit for route %s (age %sms)", route.id, age_ms)
            return self._result(snapshot.times, True, age_ms, snapshot.captured_at, now)

        logger.info("Cache miss for route %s, scraping %s", route.id, route.url)
        times = await self._run_scrape(extract_timetable, route.url)
        captured = self._clock()
        snapshot = self.cache.set(route, times, captured)
        if not self.registry.update(route):
            logger.debug("Route %s is not registered; snapshot kept in memory only", route.id)
        return self._result(snapshot.times, False, 0, snapshot.captured_at, captured)

    async def fetch_timetable_by_id(self, route_id: str) -> TimetableResult:
        return await self.fetch_timetable(self.registry.get(route_id))

    async def fetch_timetable_by_key(
        self, line_number: str, direction: Direction, station_slug: str
    ) -> TimetableResult:
        route = self.registry.find_by_key(line_number, direction, station_slug)
        return await self.fetch_timetable(route)

    # Registry -------------------------------------------------------------------

    def list_routes(self) -> List[Route]:
        return self.registry.load_routes()

    def invalidate_cache(self, route_id: str) -> Route:
        """Drop the route's snapshot whatever its age."""
        routes = self.registry.load_routes()
        route = next((r for r in routes if r.id == route_id), None)
        if route is None:
            raise RouteNotFoundError(f"Route not found: {route_id}")
        self.cache.delete(route)
        self.registry.save_routes(routes)
        logger.info("Cache invalidated for route %s", route_id)
        return route

    def create_route(self, route: Route) -> Route:
        if not route.url:
            raise InvalidRequestError("Route URL is required")
        route = resolve_identity(route)
        if not route.name:
            route.name = route_identity.display_name(None, route.line_number)
        created = self.registry.add(route)
        logger.info("Route %s created", created.id)
        return created

    def create_route_from_station(self, topology: LineTopology, station_url: str) -> Route:
        station = topology.find_station(station_url)
        if station is None:
            raise InvalidRequestError(f"Station not part of line {topology.line_number}: {station_url}")
        return self.create_route(route_from_station(topology, station))

    def delete_route(self, route_id: str) -> None:
        self.registry.delete(route_id)
        logger.info("Route %s deleted", route_id)

    # Internal helpers ---------------------------------------------------------------

    async def _run_scrape(self, extractor: Callable[[BrowserSession, str], T], url: str) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self._scrape, extractor, url))

    def _scrape(self, extractor: Callable[[BrowserSession, str], T], url: str) -> T:
        with self._session_factory() as session:
            return extractor(session, url)

    def _result(
        self,
        times: List[str],
        served_from_cache: bool,
        age_ms: int,
        captured_at: datetime,
        now: datetime,
    ) -> TimetableResult:
        local_now = now.astimezone(self._timezone)
        return TimetableResult(
            times=list(times),
            served_from_cache=served_from_cache,
            age_ms=age_ms,
            captured_at=captured_at,
            next_departure=find_next_departure(times, local_now),
        )


__all__ = ["ScraperService", "SessionFactory"]
