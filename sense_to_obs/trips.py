"""Trip reconstruction from a box's distance readings.

A trip is a maximal run of readings in which no two consecutive readings are
more than the gap threshold apart. Runs that are too short or never measured
a distance are dropped; that is ordinary filtering, not an error.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .config import TRIP_GAP_THRESHOLD_SECONDS
from .models import DistanceEvent, TrackRow, Trip, TripSummary

LOGGER = logging.getLogger(__name__)

MIN_TRIP_EVENTS = 2


def is_valid_trip(events: Sequence[DistanceEvent]) -> bool:
    """At least two readings and at least one measured distance."""

    if len(events) < MIN_TRIP_EVENTS:
        return False
    return any(event.distance_m > 0 for event in events)


def segment_trips(
    events: Iterable[DistanceEvent],
    gap_threshold: float = TRIP_GAP_THRESHOLD_SECONDS,
) -> List[Trip]:
    """Split readings (any order) into chronologically ordered trips.

    A gap strictly greater than ``gap_threshold`` seconds closes the current
    trip; a gap equal to the threshold keeps the readings together.
    """
    ordered = sorted(events, key=lambda e: e.timestamp)
    trips: List[Trip] = []
    current: List[DistanceEvent] = []

    def close() -> None:
        if not current:
            return
        if is_valid_trip(current):
            trips.append(Trip(device_id=current[0].device_id, events=tuple(current)))
        else:
            LOGGER.debug(
                "Dropping invalid trip box=%s points=%d start=%s",
                current[0].device_id,
                len(current),
                current[0].timestamp.isoformat(),
            )

    for event in ordered:
        if current:
            gap = (event.timestamp - current[-1].timestamp).total_seconds()
            if gap > gap_threshold:
                close()
                current = []
        current.append(event)
    close()
    return trips


def summarize_trip(trip: Trip, rows: Sequence[TrackRow]) -> TripSummary:
    """Timing and speed statistics for progress reporting.

    Only matched speeds above zero count towards the speed figures.
    """
    intervals = trip.intervals()
    speeds = [
        row.speed_kmh for row in rows if row.speed_kmh is not None and row.speed_kmh > 0
    ]
    return TripSummary(
        start=trip.start,
        end=trip.end,
        duration_seconds=trip.duration_seconds,
        points=len(trip),
        avg_interval_seconds=sum(intervals) / len(intervals) if intervals else 0.0,
        max_interval_seconds=max(intervals, default=0.0),
        max_speed_kmh=max(speeds, default=0.0),
        avg_speed_kmh=sum(speeds) / len(speeds) if speeds else 0.0,
    )


__all__ = ["MIN_TRIP_EVENTS", "is_valid_trip", "segment_trips", "summarize_trip"]
