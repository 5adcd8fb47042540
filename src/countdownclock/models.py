"""Data models for the subway countdown clock."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import InvalidInput


class Direction(Enum):
    """Platform direction, appended to a stop code to form the feed key."""
    NORTH = "N"
    SOUTH = "S"

    @classmethod
    def parse(cls, value) -> "Direction":
        """Parse N/S/North/South, case-insensitively."""
        if isinstance(value, Direction):
            return value
        if not isinstance(value, str):
            raise InvalidInput(f"Direction must be N or S, got {value!r}")
        normalized = value.strip().upper()
        for direction in cls:
            if normalized in (direction.value, direction.name):
                return direction
        raise InvalidInput(f"Direction must be N or S, got {value!r}")


class LineGroup(Enum):
    """A partition of subway lines that share one real-time feed."""
    IRT = "1234567"
    ACE = "ace"
    BDFM = "bdfm"
    G = "g"
    JZ = "jz"
    L = "l"
    NQRW = "nqrw"
    SIR = "si"


@dataclass(frozen=True)
class Station:
    """A resolved platform: stop code, direction and the feeds serving it."""
    stop_code: str
    direction: Direction
    name: str
    line_groups: Tuple[LineGroup, ...]

    @property
    def platform_key(self) -> str:
        """Stop ID as it appears in trip updates, e.g. "A27S"."""
        return f"{self.stop_code}{self.direction.value}"


@dataclass(frozen=True)
class StopTimeUpdate:
    stop_id: str
    arrival_time: Optional[int]  # Unix timestamp, None when the feed has no time


@dataclass(frozen=True)
class TripUpdate:
    route_id: str
    trip_id: str
    stop_time_updates: Tuple[StopTimeUpdate, ...]


@dataclass(frozen=True)
class InformedEntity:
    stop_id: Optional[str] = None
    route_id: Optional[str] = None


@dataclass(frozen=True)
class Alert:
    """A service alert and the stops/routes it is scoped to."""
    informed_entities: Tuple[InformedEntity, ...]
    descriptions: Tuple[str, ...]  # One per translation

    @property
    def description(self) -> str:
        return self.descriptions[0]


@dataclass(frozen=True)
class FeedEntity:
    id: str
    trip_update: Optional[TripUpdate] = None
    alert: Optional[Alert] = None


@dataclass(frozen=True)
class FeedMessage:
    """Decoded GTFS-realtime feed."""
    timestamp: int
    entities: Tuple[FeedEntity, ...]

    def trip_updates(self) -> List[TripUpdate]:
        return [e.trip_update for e in self.entities if e.trip_update is not None]

    def alerts(self) -> List[Alert]:
        return [e.alert for e in self.entities if e.alert is not None]


@dataclass(frozen=True, order=True)
class ArrivalEvent:
    """A predicted arrival at the target platform."""
    epoch_seconds: int
    route_id: str


@dataclass(frozen=True)
class ReportEntry:
    """One row of the countdown report."""
    minutes_remaining: int
    route_id: str


@dataclass
class RunContext:
    """State gathered during one invocation, used for debugging output."""
    station: Optional[Station] = None
    events: List[ArrivalEvent] = field(default_factory=list)
    report: List[ReportEntry] = field(default_factory=list)
    alert_text: str = ""

    def diagnostics(self) -> Dict[str, Any]:
        station = self.station
        return {
            "Stop ID": station.stop_code if station else None,
            "Stop Name": station.name if station else None,
            "Direction": station.direction.value if station else None,
            "Relevant Routes": [g.value for g in station.line_groups] if station else [],
            "Times": [[e.epoch_seconds, e.route_id] for e in self.events],
            "Report": [[r.minutes_remaining, r.route_id] for r in self.report],
            "Alert Text": self.alert_text,
        }


@dataclass
class Countdown:
    """Complete result of one countdown lookup."""
    station: Station
    report: List[ReportEntry]
    explanation: Optional[str]
    last_updated: datetime
