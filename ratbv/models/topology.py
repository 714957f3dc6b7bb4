"""Scraped line topology. Never persisted."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

from .route import Direction


@dataclass
class Station:
    """One stop of a line in one direction."""

    slug: str
    name: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LineTopology:
    """Ordered station list of a line for one direction."""

    line_name: str
    line_number: str
    direction: Direction
    master_url: str
    stations: List[Station] = field(default_factory=list)
    reversed_fallback: bool = False

    @property
    def first_station(self) -> Optional[str]:
        return self.stations[0].name if self.stations else None

    @property
    def last_station(self) -> Optional[str]:
        return self.stations[-1].name if self.stations else None

    def find_station(self, url: str) -> Optional[Station]:
        return next((station for station in self.stations if station.url == url), None)

    def reversed_as(self, direction: Direction, master_url: str) -> "LineTopology":
        """Best-effort topology for the other direction built from this one."""
        return replace(
            self,
            direction=direction,
            master_url=master_url,
            stations=list(reversed(self.stations)),
            reversed_fallback=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_name": self.line_name,
            "line_number": self.line_number,
            "direction": self.direction.value,
            "master_url": self.master_url,
            "first_station": self.first_station,
            "last_station": self.last_station,
            "reversed_fallback": self.reversed_fallback,
            "stations": [station.to_dict() for station in self.stations],
        }
