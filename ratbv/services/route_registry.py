"""Flat-file route registry.

Routes are kept in one JSON array and only ever read or written as a whole
collection: every update reads the file, mutates the list and writes it
back. There is no locking, so concurrent writers race and the last write
wins.

Records that cannot be parsed are skipped on load but written back
unchanged on every save, and a file that is not a JSON array is moved
aside to ``<name>.corrupt`` before it is overwritten.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from ..config import settings
from ..models.route import Direction, Route
from .errors import (
    DuplicateRouteIdError,
    DuplicateRouteKeyError,
    InvalidRequestError,
    RouteNotFoundError,
)
from .route_identity import resolve_identity

logger = logging.getLogger(__name__)

_MALFORMED_RECORD_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


class RouteRegistry:
    """Load/save of route records in a JSON file."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path or settings.routes_file)

    def load_routes(self) -> List[Route]:
        """Return every stored route; a missing or unreadable file means none."""
        payload = self._read_payload(warn=True)
        if payload is None:
            return []

        routes: List[Route] = []
        for entry in payload:
            try:
                route = Route.from_dict(entry)
            except _MALFORMED_RECORD_ERRORS as exc:
                logger.warning("Skipping malformed route record %r: %s", entry, exc)
                continue
            routes.append(self._backfill(route))
        return routes

    def save_routes(self, routes: List[Route]) -> None:
        """Overwrite the whole collection, keeping records that did not parse."""
        preserved = self._unparsed_records()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [route.to_dict() for route in routes] + preserved
        self.path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    def get(self, route_id: str) -> Route:
        route = next((r for r in self.load_routes() if r.id == route_id), None)
        if route is None:
            raise RouteNotFoundError(f"Route not found: {route_id}")
        return route

    def find_by_key(self, line_number: str, direction: Direction, station_slug: str) -> Route:
        key = (line_number.lower(), direction, station_slug.lower())
        for route in self.load_routes():
            if route.key == key:
                return route
        raise RouteNotFoundError(
            f"Route not found: line {line_number} {direction.value} station {station_slug}"
        )

    def add(self, route: Route) -> Route:
        """Append a route whose id and (line, direction, station) key are both new."""
        routes = self.load_routes()
        if any(existing.id == route.id for existing in routes):
            raise DuplicateRouteIdError(f"ID already exists: {route.id}")
        if None not in route.key:
            clash = next((existing for existing in routes if existing.key == route.key), None)
            if clash is not None:
                raise DuplicateRouteKeyError(
                    f"Route {clash.id} already covers line {route.line_number} "
                    f"{route.direction.value} station {route.station_slug}"
                )
        routes.append(route)
        self.save_routes(routes)
        return route

    def update(self, route: Route) -> bool:
        """Replace the stored record with the same id. Returns False if absent."""
        routes = self.load_routes()
        for index, existing in enumerate(routes):
            if existing.id == route.id:
                routes[index] = route
                self.save_routes(routes)
                return True
        return False

    def delete(self, route_id: str) -> None:
        routes = self.load_routes()
        remaining = [route for route in routes if route.id != route_id]
        if len(remaining) == len(routes):
            raise RouteNotFoundError(f"Route not found: {route_id}")
        self.save_routes(remaining)

    def _read_payload(self, warn: bool = False) -> Optional[List[Any]]:
        """Raw JSON array on disk, or None when missing, unreadable or not an array."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            if warn:
                logger.warning("Could not read route registry %s: %s", self.path, exc)
            return None

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            if warn:
                logger.warning("Route registry %s is not valid JSON: %s", self.path, exc)
            return None
        if not isinstance(payload, list):
            if warn:
                logger.warning("Route registry %s does not hold a list; ignoring it", self.path)
            return None
        return payload

    def _unparsed_records(self) -> List[Any]:
        payload = self._read_payload()
        if payload is None:
            if self.path.is_file():
                self._quarantine()
            return []

        preserved = []
        for entry in payload:
            try:
                Route.from_dict(entry)
            except _MALFORMED_RECORD_ERRORS:
                preserved.append(entry)
        return preserved

    def _quarantine(self) -> None:
        backup = self.path.with_name(self.path.name + ".corrupt")
        self.path.replace(backup)
        logger.warning("Moved unreadable route registry %s to %s", self.path, backup)

    def _backfill(self, route: Route) -> Route:
        # Records written before the composite key existed only carry a URL.
        if route.line_number and route.direction and route.station_slug:
            return route
        try:
            return resolve_identity(route)
        except InvalidRequestError:
            logger.debug("Route %s has no resolvable identity", route.id)
            return route
