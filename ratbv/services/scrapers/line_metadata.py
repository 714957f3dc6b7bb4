"""Line name and ordered station list from a RATBV master page.

The master page (``/afisaje/{line}-{direction}.html``) is a frameset:

* frame 2 ("MainFrame") shows the line name in ``#linia_web b`` and, on a
  per-station page, the station name in ``#statie_web b``;
* frame 1 holds the station list, one ``div`` per station carrying one of
  the marker classes below, each with the name in ``<b>`` and a link to the
  station's timetable.
"""

from __future__ import annotations

import logging
from typing import List
from urllib.parse import urljoin

from ...models.topology import LineTopology, Station
from ..browser import BrowserSession, by_class, by_id, by_tag
from ..errors import ScrapeFailure
from ..route_identity import parse_line_segment, slugify_station_name

logger = logging.getLogger(__name__)

MAIN_FRAME_INDEX = 2
STATION_LIST_FRAME_INDEX = 1

# Current station, intermediate stations, terminal station.
STATION_MARKER_CLASSES = ("list_sus_active", "list_statie", "list_jos_active")


def extract_line_topology(session: BrowserSession, master_url: str) -> LineTopology:
    """Scrape the line name and stations for one direction of one line."""
    line_number, direction = parse_line_segment(master_url)
    session.navigate(master_url)

    session.switch_to_frame(MAIN_FRAME_INDEX)
    line_name = _bold_text(session, by_id("linia_web"))

    session.switch_to_frame(None)
    session.switch_to_frame(STATION_LIST_FRAME_INDEX)
    stations = extract_stations(session)

    logger.info(
        "Scraped %s stations for line %s (%s)",
        len(stations),
        line_number,
        direction.value,
        extra={"line": line_number, "direction": direction.value},
    )
    return LineTopology(
        line_name=line_name,
        line_number=line_number,
        direction=direction,
        master_url=master_url,
        stations=stations,
    )


def extract_stations(session: BrowserSession) -> List[Station]:
    """Read every station entry of the current document, in document order."""
    stations: List[Station] = []
    base_url = session.current_url
    for element in session.find_elements(by_class(*STATION_MARKER_CLASSES)):
        name = session.get_text(session.find_element(by_tag("b"), within=element)).strip()
        link = session.find_element(by_tag("a"), within=element)
        href = session.get_attribute(link, "href")
        if not href:
            raise ScrapeFailure(f"Station {name!r} has no timetable link")
        stations.append(
            Station(
                slug=slugify_station_name(name),
                name=name,
                url=urljoin(base_url, href.strip()),
            )
        )
    return stations


def extract_station_name(session: BrowserSession, station_url: str) -> str:
    """Station name shown on a per-station timetable page."""
    session.navigate(station_url)
    session.switch_to_frame(MAIN_FRAME_INDEX)
    return _bold_text(session, by_id("statie_web"))


def _bold_text(session: BrowserSession, selector: str) -> str:
    container = session.find_element(selector)
    return session.get_text(session.find_element(by_tag("b"), within=container)).strip()


__all__ = [
    "STATION_MARKER_CLASSES",
    "extract_line_topology",
    "extract_station_name",
    "extract_stations",
]
