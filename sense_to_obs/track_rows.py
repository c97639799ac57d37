"""Conversion of matched readings into OBS track rows."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, List

from .config import LOW_SPEED_THRESHOLD_KMH
from .matching import MatchedPair
from .models import DistanceEvent, SpeedEvent, TrackRow
from .utils import round_half_up, to_utc

# OBS converts echo flight time to distance with this factor (us per cm).
FLIGHT_TIME_FACTOR = 58

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def speed_to_kmh(speed_ms: float | None) -> float | None:
    if speed_ms is None:
        return None
    return round_half_up(float(speed_ms) * 3.6, 1)


def distance_to_cm(distance_m: float) -> int:
    return int(round_half_up(float(distance_m) * 100))


def is_confirmed(
    distance_m: float,
    speed_kmh: float | None,
    low_speed_kmh: float = LOW_SPEED_THRESHOLD_KMH,
) -> int:
    """1 when the reading counts as an overtaking, else 0.

    A known speed below ``low_speed_kmh`` always rejects the reading. Without
    a matched speed only the distance decides.
    """
    if speed_kmh is not None and speed_kmh < low_speed_kmh:
        return 0
    return 1 if distance_m > 0 else 0


def build_track_row(event: DistanceEvent, speed: SpeedEvent | None) -> TrackRow:
    timestamp = to_utc(event.timestamp)
    speed_kmh = speed_to_kmh(speed.speed_ms if speed is not None else None)
    left_cm = distance_to_cm(event.distance_m)
    return TrackRow(
        date=timestamp.strftime("%d.%m.%Y"),
        time=timestamp.strftime("%H:%M:%S"),
        millis=(timestamp - _EPOCH) // timedelta(milliseconds=1),
        latitude=event.latitude,
        longitude=event.longitude,
        altitude=event.altitude,
        speed_kmh=speed_kmh,
        left_cm=left_cm,
        confirmed=is_confirmed(event.distance_m, speed_kmh),
        lus1=left_cm * FLIGHT_TIME_FACTOR,
        factor=FLIGHT_TIME_FACTOR,
    )


def build_track_rows(pairs: Iterable[MatchedPair]) -> List[TrackRow]:
    return [build_track_row(event, speed) for event, speed in pairs]


__all__ = [
    "FLIGHT_TIME_FACTOR",
    "build_track_row",
    "build_track_rows",
    "distance_to_cm",
    "is_confirmed",
    "speed_to_kmh",
]
