from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Box:
    box_id: str
    name: str = ""


@dataclass(frozen=True)
class DistanceEvent:
    device_id: str
    timestamp: datetime
    latitude: float | None
    longitude: float | None
    altitude: float | None
    # Left overtaking distance in metres; 0 means nothing was measured
    distance_m: float


@dataclass(frozen=True)
class SpeedEvent:
    device_id: str
    timestamp: datetime
    speed_ms: float


@dataclass(frozen=True)
class Trip:
    """Time-ordered distance readings of one box forming a single ride."""

    device_id: str
    events: Tuple[DistanceEvent, ...]

    def __post_init__(self) -> None:
        if not self.events:
            raise ValueError("a trip needs at least one event")

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[DistanceEvent]:
        return iter(self.events)

    @property
    def start(self) -> datetime:
        return self.events[0].timestamp

    @property
    def end(self) -> datetime:
        return self.events[-1].timestamp

    @property
    def duration_seconds(self) -> float:
        return (self.end - self.start).total_seconds()

    def intervals(self) -> List[float]:
        """Seconds between consecutive readings."""
        return [
            (nxt.timestamp - cur.timestamp).total_seconds()
            for cur, nxt in zip(self.events, self.events[1:])
        ]


@dataclass(frozen=True)
class TrackRow:
    """One line of an OBS track file. Field order follows ``TRACK_COLUMNS``."""

    date: str
    time: str
    millis: int
    latitude: float | None
    longitude: float | None
    altitude: float | None
    speed_kmh: float | None
    left_cm: int
    confirmed: int
    lus1: int
    comment: str = ""
    course: str = ""
    hdop: str = ""
    satellites: str = ""
    battery_level: str = ""
    right_cm: str = ""
    marked: str = ""
    invalid: int = 0
    inside_privacy_area: int = 0
    factor: int = 58
    measurements: int = 1
    tms1: int = 0
    rus1: str = ""

    def as_fields(self) -> List[object]:
        """Values in column order.

        Missing coordinates stay ``None`` and are written as bare empty fields.
        Placeholder columns and an unmatched speed are empty strings, which the
        encoder writes as ``""``.
        """
        return [
            self.date,
            self.time,
            self.millis,
            self.comment,
            self.latitude,
            self.longitude,
            self.altitude,
            self.course,
            "" if self.speed_kmh is None else self.speed_kmh,
            self.hdop,
            self.satellites,
            self.battery_level,
            self.left_cm,
            self.right_cm,
            self.confirmed,
            self.marked,
            self.invalid,
            self.inside_privacy_area,
            self.factor,
            self.measurements,
            self.tms1,
            self.lus1,
            self.rus1,
        ]


@dataclass(frozen=True)
class TripSummary:
    start: datetime
    end: datetime
    duration_seconds: float
    points: int
    avg_interval_seconds: float
    max_interval_seconds: float
    max_speed_kmh: float
    avg_speed_kmh: float


@dataclass(frozen=True)
class TrackFile:
    track_id: str
    content: str
    row_count: int


@dataclass
class UploadResult:
    success: bool
    status_code: Optional[int] = None
    detail: Optional[str] = None


@dataclass
class RunStats:
    boxes: int = 0
    boxes_failed: int = 0
    trips: int = 0
    uploaded: int = 0
    upload_failures: int = 0
    written: List[str] = field(default_factory=list)
