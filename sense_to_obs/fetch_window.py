"""Fetch window policy for raw readings.

The window starts at the box's watermark and, by default, ends at 02:00
local time of the current day. Rides that run past midnight are then fetched
whole on the next run instead of being cut in two.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from .config import DISPLAY_TIMEZONE, FETCH_WINDOW_CUTOFF_HOUR
from .utils import format_iso_millis, to_utc


@dataclass(frozen=True)
class FetchWindow:
    start: datetime
    end: datetime

    @property
    def is_empty(self) -> bool:
        return self.start >= self.end

    def as_params(self) -> dict[str, str]:
        return {
            "from-date": format_iso_millis(self.start),
            "to-date": format_iso_millis(self.end),
        }


def window_end(
    now: datetime,
    cutoff_hour: int | None = FETCH_WINDOW_CUTOFF_HOUR,
    tz_name: str = DISPLAY_TIMEZONE,
) -> datetime:
    """Cutoff hour of ``now``'s local day, in UTC; ``now`` when disabled."""

    if cutoff_hour is None or cutoff_hour < 0:
        return to_utc(now)
    local_now = to_utc(now).astimezone(ZoneInfo(tz_name))
    cutoff = local_now.replace(hour=cutoff_hour, minute=0, second=0, microsecond=0)
    return cutoff.astimezone(timezone.utc)


def compute_fetch_window(
    start: datetime,
    now: datetime,
    cutoff_hour: int | None = FETCH_WINDOW_CUTOFF_HOUR,
    tz_name: str = DISPLAY_TIMEZONE,
) -> FetchWindow:
    return FetchWindow(
        start=to_utc(start), end=window_end(now, cutoff_hour, tz_name)
    )


__all__ = ["FetchWindow", "compute_fetch_window", "window_end"]
