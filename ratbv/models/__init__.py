"""Domain models for RATBV bus times."""

from .route import CacheSnapshot, Direction, Route
from .timetable import TimeEntry, TimetableResult
from .topology import LineTopology, Station

__all__ = [
    "CacheSnapshot",
    "Direction",
    "LineTopology",
    "Route",
    "Station",
    "TimeEntry",
    "TimetableResult",
]
