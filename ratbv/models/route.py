"""Route records and their attached timetable snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


class Direction(str, Enum):
    """Travel direction of a line, named the way the site names it."""

    OUTBOUND = "dus"
    INBOUND = "intors"

    @property
    def opposite(self) -> "Direction":
        return Direction.INBOUND if self is Direction.OUTBOUND else Direction.OUTBOUND

    @classmethod
    def parse(cls, value: str) -> "Direction":
        """Accept the site tokens as well as the English names."""
        normalized = (value or "").strip().lower()
        aliases = {"outbound": cls.OUTBOUND, "inbound": cls.INBOUND}
        if normalized in aliases:
            return aliases[normalized]
        return cls(normalized)


def to_epoch_ms(moment: datetime) -> int:
    return (moment - _EPOCH) // _ONE_MS


def from_epoch_ms(value: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=int(value))


@dataclass
class CacheSnapshot:
    """Most recently scraped timetable for a single route."""

    times: List[str]
    captured_at: datetime

    @classmethod
    def capture(cls, times: List[str], now: datetime) -> "CacheSnapshot":
        # Stored with millisecond precision, so truncate up front to keep
        # the in-memory value identical to what a reload returns.
        truncated = now.replace(microsecond=(now.microsecond // 1000) * 1000)
        return cls(times=list(times), captured_at=truncated)

    def age(self, now: datetime) -> timedelta:
        elapsed = now - self.captured_at
        return elapsed if elapsed > timedelta(0) else timedelta(0)


@dataclass
class Route:
    """A (line, direction, station) triple with its own cached timetable."""

    id: str
    name: str
    station_name: str
    url: str
    line_number: Optional[str] = None
    direction: Optional[Direction] = None
    station_slug: Optional[str] = None
    first_station: Optional[str] = None
    last_station: Optional[str] = None
    cache: Optional[CacheSnapshot] = None

    @property
    def key(self) -> Tuple[Optional[str], Optional[Direction], Optional[str]]:
        """Composite lookup key used by the display path."""
        return (self.line_number, self.direction, self.station_slug)

    def clear_cache(self) -> None:
        self.cache = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "lineNumber": self.line_number,
            "direction": self.direction.value if self.direction else None,
            "stationSlug": self.station_slug,
            "stationName": self.station_name,
            "url": self.url,
            "firstStation": self.first_station,
            "lastStation": self.last_station,
        }
        if self.cache is not None:
            payload["cachedBusTimes"] = list(self.cache.times)
            payload["cacheTimestamp"] = to_epoch_ms(self.cache.captured_at)
        return {key: value for key, value in payload.items() if value is not None}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Route":
        cache = None
        times = payload.get("cachedBusTimes")
        timestamp = payload.get("cacheTimestamp")
        if times is not None and timestamp is not None:
            cache = CacheSnapshot(times=list(times), captured_at=from_epoch_ms(timestamp))

        direction = payload.get("direction")
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            station_name=payload.get("stationName", ""),
            url=payload.get("url", ""),
            line_number=payload.get("lineNumber"),
            direction=Direction.parse(direction) if direction else None,
            station_slug=payload.get("stationSlug"),
            first_station=payload.get("firstStation"),
            last_station=payload.get("lastStation"),
            cache=cache,
        )
