"""Scrapers for the frame-based RATBV timetable pages (no API available)."""

from .line_metadata import extract_line_topology, extract_station_name, extract_stations
from .timetable import extract_timetable, find_next_departure, flatten_timetable

__all__ = [
    "extract_line_topology",
    "extract_station_name",
    "extract_stations",
    "extract_timetable",
    "find_next_departure",
    "flatten_timetable",
]
