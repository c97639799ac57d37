"""Per-box export watermarks.

A watermark is the timestamp of the last reading that reached the portal.
It bounds the next fetch window and only ever moves forward, so a restarted
run never uploads the same trip twice.
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict

from .config import (
    LAST_UPDATE_DIR,
    WATERMARK_DEFAULT_LOOKBACK_DAYS,
    WATERMARK_GUARD_SECONDS,
)
from .utils import format_iso_millis, parse_timestamp, to_utc

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Layout written by earlier versions of the exporter (date and time of the
# last track row).
_LEGACY_FORMAT = "%d.%m.%Y %H:%M:%S"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_watermark(raw: str) -> datetime | None:
    text = raw.strip()
    if not text:
        return None
    parsed = parse_timestamp(text)
    if parsed is not None:
        return parsed
    try:
        return datetime.strptime(text, _LEGACY_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


class WatermarkStore(ABC):
    """Keyed store of box id -> last exported instant.

    Subclasses provide ``_read`` and ``_write``; this class owns the
    defaulting, the guard offset and the never-decrease rule.
    """

    def __init__(
        self,
        *,
        lookback_days: int = WATERMARK_DEFAULT_LOOKBACK_DAYS,
        guard_seconds: int = WATERMARK_GUARD_SECONDS,
        clock: Clock = _utc_now,
    ) -> None:
        self.lookback = timedelta(days=lookback_days)
        self.guard = timedelta(seconds=guard_seconds)
        self._clock = clock

    @abstractmethod
    def _read(self, device_id: str) -> str | None:
        """Raw stored value for the box, or None."""

    @abstractmethod
    def _write(self, device_id: str, value: str) -> None:
        """Store the already formatted value."""

    def last_exported(self, device_id: str) -> datetime | None:
        raw = self._read(device_id)
        if raw is None:
            return None
        parsed = parse_watermark(raw)
        if parsed is None and raw.strip():
            LOGGER.warning(
                "Ignoring unreadable watermark for box=%s value=%r", device_id, raw
            )
        return parsed

    def fetch_start(self, device_id: str) -> datetime:
        """First instant to fetch for the box."""

        last = self.last_exported(device_id)
        if last is None:
            return to_utc(self._clock()) - self.lookback
        return last + self.guard

    def get(self, device_id: str) -> str:
        """``fetch_start`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""

        return format_iso_millis(self.fetch_start(device_id))

    def set(self, device_id: str, timestamp: datetime | str) -> bool:
        """Persist ``timestamp`` as the box's watermark.

        Returns False (and keeps the stored value) when ``timestamp`` is older
        than the current watermark.
        """
        if isinstance(timestamp, str):
            parsed = parse_watermark(timestamp)
            if parsed is None:
                raise ValueError(f"Invalid watermark timestamp: {timestamp!r}")
            timestamp = parsed
        value = to_utc(timestamp)
        current = self.last_exported(device_id)
        if current is not None and value < current:
            LOGGER.warning(
                "Refusing to move watermark backwards for box=%s (%s < %s)",
                device_id,
                format_iso_millis(value),
                format_iso_millis(current),
            )
            return False
        self._write(device_id, format_iso_millis(value))
        LOGGER.debug("Watermark box=%s -> %s", device_id, format_iso_millis(value))
        return True


class FileWatermarkStore(WatermarkStore):
    """One ``last_update_<box>.txt`` file per box inside ``directory``."""

    def __init__(self, directory: str | Path = LAST_UPDATE_DIR, **kwargs) -> None:
        super().__init__(**kwargs)
        self.directory = Path(directory)

    def path_for(self, device_id: str) -> Path:
        return self.directory / f"last_update_{device_id}.txt"

    def _read(self, device_id: str) -> str | None:
        path = self.path_for(device_id)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, device_id: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.directory, prefix=".last_update_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, self.path_for(device_id))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class InMemoryWatermarkStore(WatermarkStore):
    """Dict-backed store for dry runs and tests."""

    def __init__(self, initial: Dict[str, str] | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._values: Dict[str, str] = dict(initial or {})

    def _read(self, device_id: str) -> str | None:
        return self._values.get(device_id)

    def _write(self, device_id: str, value: str) -> None:
        self._values[device_id] = value


__all__ = [
    "FileWatermarkStore",
    "InMemoryWatermarkStore",
    "WatermarkStore",
    "parse_watermark",
]
