"""Arrival-time grid of a single RATBV station page."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ...models.timetable import TimeEntry
from ..browser import BrowserSession, by_id

logger = logging.getLogger(__name__)

TABLE_ID = "tabel2"
HOURS_ID = "web_class_hours"
MINUTES_WRAPPER_ID = "web_class_minutes"
MINUTE_ID = "web_min"


def extract_timetable(session: BrowserSession, station_url: str) -> List[str]:
    """Scrape the station page and return ``H:MM`` strings in page order."""
    session.navigate(station_url)

    table = session.find_element(by_id(TABLE_ID))
    hour_elements = session.find_elements(by_id(HOURS_ID), within=table)
    wrapper_elements = session.find_elements(by_id(MINUTES_WRAPPER_ID), within=table)

    hours = [session.get_text(element) for element in hour_elements]
    minutes_by_hour = [
        [session.get_text(minute) for minute in session.find_elements(by_id(MINUTE_ID), within=wrapper)]
        for wrapper in wrapper_elements
    ]

    times = flatten_timetable(hours, minutes_by_hour)
    logger.info("Scraped %s departures from %s", len(times), station_url)
    return times


def flatten_timetable(hours: Sequence[str], minutes_by_hour: Sequence[Iterable[str]]) -> List[str]:
    """Pair each hour with the minute group at the same position.

    Hours without a matching minute group contribute nothing. Order is the
    page's hour-then-minute order; no sorting across midnight is done.
    """
    times: List[str] = []
    for index, hour in enumerate(hours):
        if index >= len(minutes_by_hour):
            continue
        hour = hour.strip()
        for minute in minutes_by_hour[index]:
            minute = minute.strip()
            if minute:
                times.append(f"{hour}:{minute}")
    return times


def find_next_departure(times: Sequence[str], now: datetime) -> Optional[int]:
    """Index of the first time later than ``now``'s hour and minute.

    Compares time-of-day only and walks the list in page order, so entries
    after midnight are never "next" while ``now`` is still the previous
    evening.
    """
    current = TimeEntry.from_datetime(now)
    for index, text in enumerate(times):
        try:
            entry = TimeEntry.parse(text)
        except ValueError:
            continue
        if entry > current:
            return index
    return None


__all__ = ["extract_timetable", "find_next_departure", "flatten_timetable"]
