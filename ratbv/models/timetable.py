"""Time-of-day entries and timetable responses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Dict, List, NamedTuple, Optional


class TimeEntry(NamedTuple):
    """Recurring daily arrival instant, no date component."""

    hour: int
    minute: int

    @classmethod
    def parse(cls, text: str) -> "TimeEntry":
        hour, _, minute = text.strip().partition(":")
        return cls(int(hour), int(minute))

    @classmethod
    def from_datetime(cls, moment: datetime) -> "TimeEntry":
        return cls(moment.hour, moment.minute)

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def __str__(self) -> str:
        return f"{self.hour}:{self.minute:02d}"


@dataclass
class TimetableResult:
    """Times for one route plus where they came from."""

    times: List[str]
    served_from_cache: bool
    age_ms: int
    captured_at: datetime
    next_departure: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not self.times

    def to_dict(self) -> Dict[str, Any]:
        return {
            "times": list(self.times),
            "served_from_cache": self.served_from_cache,
            "age_ms": self.age_ms,
            "captured_at": self.captured_at.isoformat(),
            "next_departure": self.next_departure,
            "empty": self.is_empty,
        }
