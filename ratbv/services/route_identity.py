"""Stable identities for lines, stations and routes derived from scraped URLs.

The site lays timetables out as::

    https://www.ratbv.ro/afisaje/23b-dus.html                  (master page)
    https://www.ratbv.ro/afisaje/23b-dus/line_23b_3_cl1_ro.html (one station)

so the line token and direction come from the ``{line}-{direction}`` path
segment and the station token from the ``line_{line}_{station}_...`` file
name.  Route ids built here are persisted and used in public URLs: changing
the derivation after routes exist orphans their ids.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple
from urllib.parse import urljoin, urlparse

from ..config import settings
from ..models.route import Direction, Route
from ..models.topology import LineTopology, Station
from .errors import InvalidRequestError

_LINE_SEGMENT_RE = re.compile(
    r"/(?P<line>[0-9a-z]+)-(?P<direction>dus|intors)(?:\.html?)?(?=/|$)",
    re.IGNORECASE,
)
_STATION_FILE_RE = re.compile(
    r"line_[0-9a-z]+_(?P<station>[0-9a-z]+)_[^/]*\.html?$",
    re.IGNORECASE,
)
_WHITESPACE_RE = re.compile(r"\s+")


def slugify_station_name(name: str) -> str:
    """Readable station slug, e.g. ``"Sala Sporturilor"`` -> ``"sala-sporturilor"``."""
    return _WHITESPACE_RE.sub("-", name.strip().lower().replace(".", ""))


def parse_line_segment(url: str) -> Tuple[str, Direction]:
    """Extract ``(line, direction)`` from a master or per-station URL."""
    path = urlparse(url or "").path
    match = _LINE_SEGMENT_RE.search(path)
    if not match:
        raise InvalidRequestError(f"Cannot determine line and direction from URL: {url!r}")
    return match.group("line").lower(), Direction.parse(match.group("direction"))


def parse_station_token(url: str) -> Optional[str]:
    """Station token embedded in a per-station file name, if any."""
    path = urlparse(url or "").path
    match = _STATION_FILE_RE.search(path)
    return match.group("station").lower() if match else None


def station_slug(station: Station) -> str:
    """Prefer the URL token; fall back to the slug derived from the name."""
    return parse_station_token(station.url) or station.slug


def compose_route_id(line_number: str, slug: str, direction: Direction) -> str:
    return f"{line_number}-{slug}-{direction.value}"


def master_url(line_number: str, direction: Direction, base_url: Optional[str] = None) -> str:
    base = base_url or settings.ratbv_base_url
    if not base.endswith("/"):
        base += "/"
    return urljoin(base, f"{line_number.strip().lower()}-{direction.value}.html")


def display_name(line_name: Optional[str], line_number: str) -> str:
    """Route title; the scraped line name wins over a synthesized one."""
    if line_name and line_name.strip():
        return line_name.strip()
    return f"Linia {line_number.upper()}"


def route_from_station(topology: LineTopology, station: Station) -> Route:
    """Build the persisted route record for a station picked from a topology."""
    slug = station_slug(station)
    return Route(
        id=compose_route_id(topology.line_number, slug, topology.direction),
        name=display_name(topology.line_name, topology.line_number),
        station_name=station.name,
        url=station.url,
        line_number=topology.line_number,
        direction=topology.direction,
        station_slug=slug,
        first_station=topology.first_station,
        last_station=topology.last_station,
    )


def resolve_identity(route: Route) -> Route:
    """Fill in any missing identity fields of ``route`` from its URL.

    Raises:
        InvalidRequestError: if identity fields are missing and the URL does
            not follow the site's layout.
    """
    if route.line_number and route.direction and route.station_slug:
        if not route.id:
            route.id = compose_route_id(route.line_number, route.station_slug, route.direction)
        return route

    line_number, direction = parse_line_segment(route.url)
    route.line_number = route.line_number or line_number
    route.direction = route.direction or direction
    if not route.station_slug:
        route.station_slug = parse_station_token(route.url) or (
            slugify_station_name(route.station_name) if route.station_name else None
        )
    if not route.station_slug:
        raise InvalidRequestError(f"Cannot determine station for URL: {route.url!r}")
    if not route.id:
        route.id = compose_route_id(route.line_number, route.station_slug, route.direction)
    return route


__all__ = [
    "compose_route_id",
    "display_name",
    "master_url",
    "parse_line_segment",
    "parse_station_token",
    "resolve_identity",
    "route_from_station",
    "slugify_station_name",
    "station_slug",
]
