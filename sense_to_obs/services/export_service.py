"""Trip export service.

Drives the per-box pipeline: watermark -> fetch window -> readings -> trips ->
track files -> upload -> watermark. Boxes are handled one after another and
trips in chronological order; an error in one box is logged and the run moves
on to the next box. Pure steps (segmenting, matching, row building, encoding)
live in their own modules so they can be tested without I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

from ..clients.obs_portal import track_filename
from ..clients.opensensemap import OpenSenseMapClient
from ..config import (
    DISPLAY_TIMEZONE,
    FETCH_WINDOW_CUTOFF_HOUR,
    SPEED_MATCH_TOLERANCE_SECONDS,
    TRIP_GAP_THRESHOLD_SECONDS,
)
from ..fetch_window import FetchWindow, compute_fetch_window
from ..matching import SpeedIndex, match_speeds
from ..models import (
    Box,
    DistanceEvent,
    RunStats,
    SpeedEvent,
    TrackFile,
    Trip,
    UploadResult,
)
from ..progress import PipelineObserver
from ..track_file import TrackIdProvider, encode_track_file, new_track_id
from ..track_rows import build_track_rows
from ..trips import segment_trips, summarize_trip
from ..utils import format_iso_millis
from ..watermark import FileWatermarkStore, WatermarkStore


class ReadingSource(Protocol):
    def fetch_distance_events(
        self, box_id: str, window: FetchWindow
    ) -> List[DistanceEvent]: ...

    def fetch_speed_events(self, box_id: str, window: FetchWindow) -> List[SpeedEvent]: ...


class TrackUploader(Protocol):
    def upload_track(
        self, track: TrackFile, box_id: str, trip_number: int
    ) -> UploadResult: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ExportServiceConfig:
    source: ReadingSource = field(default_factory=OpenSenseMapClient)
    # None disables uploads and watermark updates (dry run)
    uploader: Optional[TrackUploader] = None
    watermarks: WatermarkStore = field(default_factory=FileWatermarkStore)
    observer: PipelineObserver = field(default_factory=PipelineObserver)
    track_id_provider: TrackIdProvider = new_track_id
    output_dir: str | None = None
    gap_threshold: float = TRIP_GAP_THRESHOLD_SECONDS
    match_tolerance: float = SPEED_MATCH_TOLERANCE_SECONDS
    cutoff_hour: int | None = FETCH_WINDOW_CUTOFF_HOUR
    tz_name: str = DISPLAY_TIMEZONE
    clock: Callable[[], datetime] = _utc_now
    logger: logging.Logger | None = None


class ExportService:
    def __init__(self, config: ExportServiceConfig | None = None):
        self.config = config or ExportServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    def process(self, boxes: Sequence[Box]) -> RunStats:
        stats = RunStats()
        observer = self.config.observer
        observer.run_started(len(boxes))
        for box in boxes:
            stats.boxes += 1
            try:
                self.process_box(box, stats)
            except Exception as exc:
                stats.boxes_failed += 1
                self._log.error(
                    "Box %s processing failed due to unexpected error: %s",
                    box.box_id,
                    exc,
                    exc_info=True,
                )
                observer.box_failed(box, exc)
        observer.run_finished(stats)
        return stats

    def fetch_window(self, box_id: str) -> FetchWindow:
        return compute_fetch_window(
            self.config.watermarks.fetch_start(box_id),
            self.config.clock(),
            self.config.cutoff_hour,
            self.config.tz_name,
        )

    def process_box(self, box: Box, stats: RunStats) -> None:
        cfg = self.config
        window = self.fetch_window(box.box_id)
        distance_events = cfg.source.fetch_distance_events(box.box_id, window)
        if not distance_events:
            cfg.observer.box_skipped(box, "no distance data")
            return
        speed_events = cfg.source.fetch_speed_events(box.box_id, window)
        cfg.observer.box_started(box, len(distance_events), len(speed_events))

        index = SpeedIndex(speed_events)
        trips = segment_trips(distance_events, cfg.gap_threshold)
        cfg.observer.trips_identified(box, len(trips))
        for trip_number, trip in enumerate(trips, start=1):
            stats.trips += 1
            self.export_trip(box, trip_number, trip, index, stats)

    def export_trip(
        self,
        box: Box,
        trip_number: int,
        trip: Trip,
        index: SpeedIndex,
        stats: RunStats,
    ) -> TrackFile:
        cfg = self.config
        rows = build_track_rows(
            match_speeds(trip.events, index, cfg.match_tolerance)
        )
        cfg.observer.trip_found(box, trip_number, summarize_trip(trip, rows))
        track = encode_track_file(rows, box.box_id, cfg.track_id_provider)

        if cfg.output_dir:
            path = self._write_track(track, box, trip_number, trip)
            stats.written.append(str(path))
            cfg.observer.track_written(box, trip_number, str(path))

        if cfg.uploader is None:
            self._log.debug(
                "Dry run: not uploading trip %d for box=%s", trip_number, box.box_id
            )
            return track

        result = cfg.uploader.upload_track(track, box.box_id, trip_number)
        if result.success:
            stats.uploaded += 1
            cfg.watermarks.set(box.box_id, trip.end)
            cfg.observer.upload_succeeded(
                box, trip_number, result, format_iso_millis(trip.end)
            )
        else:
            stats.upload_failures += 1
            cfg.observer.upload_failed(box, trip_number, result)
        return track

    def _write_track(
        self, track: TrackFile, box: Box, trip_number: int, trip: Trip
    ) -> Path:
        directory = Path(self.config.output_dir or ".")
        directory.mkdir(parents=True, exist_ok=True)
        stem = Path(track_filename(box.box_id, trip_number)).stem
        path = directory / f"{stem}_{trip.start.strftime('%Y%m%d_%H%M%S')}.csv"
        path.write_text(track.content, encoding="utf-8", newline="")
        return path


__all__ = ["ExportService", "ExportServiceConfig", "ReadingSource", "TrackUploader"]
