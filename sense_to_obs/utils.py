"""General utility helpers shared across modules."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed) into UTC, or None."""

    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def format_iso_millis(value: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""

    utc = to_utc(value)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def format_local_time(value: datetime, tz_name: str) -> str:
    """Format for humans in the given IANA timezone."""

    return to_utc(value).astimezone(ZoneInfo(tz_name)).strftime("%Y-%m-%d %H:%M:%S %Z")


def format_duration(seconds: float) -> str:
    """Humanise a duration: seconds, minutes, hours or days with two decimals."""

    if seconds < 60:
        return f"{round(seconds, 2)} seconds"
    minutes = seconds / 60
    if minutes < 60:
        return f"{round(minutes, 2)} minutes"
    hours = minutes / 60
    if hours < 24:
        return f"{round(hours, 2)} hours"
    return f"{round(hours / 24, 2)} days"


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half away from zero (``round`` rounds half to even)."""

    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def mask_tail(value: str | None, visible: int = 4) -> str:
    if not value:
        return ""
    return f"****{value[-visible:]}"
