"""Nearest-in-time correlation of distance readings with speed readings.

Distance and speed are published as two independently sampled series. For
every distance reading we want the speed reading closest in time, within a
small tolerance. ``SpeedIndex`` sorts the speed series once and answers each
lookup with a binary search, so correlating a trip costs O(n log m).
"""

from __future__ import annotations

import bisect
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import SPEED_MATCH_TOLERANCE_SECONDS
from .models import DistanceEvent, SpeedEvent

MatchedPair = Tuple[DistanceEvent, Optional[SpeedEvent]]


class SpeedIndex:
    """Speed readings of one box, sorted ascending by timestamp."""

    def __init__(self, events: Iterable[SpeedEvent]) -> None:
        self._events: List[SpeedEvent] = sorted(events, key=lambda e: e.timestamp)
        self._times: List[datetime] = [e.timestamp for e in self._events]

    def __len__(self) -> int:
        return len(self._events)

    def lookup(
        self,
        target: datetime,
        max_delta: float = SPEED_MATCH_TOLERANCE_SECONDS,
    ) -> SpeedEvent | None:
        """Return the reading closest to ``target`` if within ``max_delta`` seconds.

        An exact timestamp match is returned immediately. Otherwise the
        neighbours of the insertion point (left, at, right) are compared in
        that order and only a strictly smaller difference replaces the
        current best.
        """
        if not self._events:
            return None
        pos = bisect.bisect_left(self._times, target)
        if pos < len(self._times) and self._times[pos] == target:
            return self._events[pos]

        best: SpeedEvent | None = None
        best_diff = 0.0
        for idx in (pos - 1, pos, pos + 1):
            if idx < 0 or idx >= len(self._events):
                continue
            diff = abs((self._times[idx] - target).total_seconds())
            if diff > max_delta:
                continue
            if best is None or diff < best_diff:
                best = self._events[idx]
                best_diff = diff
        return best


def match_speeds(
    events: Sequence[DistanceEvent],
    index: SpeedIndex,
    max_delta: float = SPEED_MATCH_TOLERANCE_SECONDS,
) -> List[MatchedPair]:
    """Pair every distance reading with its nearest speed reading (or None)."""

    return [(event, index.lookup(event.timestamp, max_delta)) for event in events]


__all__ = ["MatchedPair", "SpeedIndex", "match_speeds"]
