"""Progress callbacks invoked by the export pipeline.

``PipelineObserver`` does nothing; subclass it and override the checkpoints
you care about. ``LoggingObserver`` narrates a run to the log.
"""

from __future__ import annotations

import logging

from .config import DISPLAY_TIMEZONE
from .models import Box, RunStats, TripSummary, UploadResult
from .utils import format_duration, format_local_time

LOGGER = logging.getLogger(__name__)

_RULE = "-" * 40


class PipelineObserver:
    def run_started(self, box_count: int) -> None:
        pass

    def box_started(self, box: Box, distance_count: int, speed_count: int) -> None:
        pass

    def box_skipped(self, box: Box, reason: str) -> None:
        pass

    def trips_identified(self, box: Box, trip_count: int) -> None:
        pass

    def trip_found(self, box: Box, trip_number: int, summary: TripSummary) -> None:
        pass

    def upload_succeeded(
        self, box: Box, trip_number: int, result: UploadResult, watermark: str
    ) -> None:
        pass

    def upload_failed(self, box: Box, trip_number: int, result: UploadResult) -> None:
        pass

    def track_written(self, box: Box, trip_number: int, path: str) -> None:
        pass

    def box_failed(self, box: Box, error: Exception) -> None:
        pass

    def run_finished(self, stats: RunStats) -> None:
        pass


class LoggingObserver(PipelineObserver):
    def __init__(
        self, logger: logging.Logger | None = None, tz_name: str = DISPLAY_TIMEZONE
    ) -> None:
        self._log = logger or LOGGER
        self.tz_name = tz_name

    def _time(self, value) -> str:
        return format_local_time(value, self.tz_name)

    def run_started(self, box_count: int) -> None:
        self._log.info("Processing data for %d boxes", box_count)

    def box_started(self, box: Box, distance_count: int, speed_count: int) -> None:
        self._log.info(_RULE)
        self._log.info("Box ID: %s", box.box_id)
        if box.name:
            self._log.info("Box Name: %s", box.name)
        self._log.info("Total data points: %d", distance_count)
        self._log.info("Found %d speed measurements for this box", speed_count)

    def box_skipped(self, box: Box, reason: str) -> None:
        self._log.info("Skipping box %s: %s", box.box_id, reason)

    def trips_identified(self, box: Box, trip_count: int) -> None:
        self._log.info("Identified %d trips", trip_count)

    def trip_found(self, box: Box, trip_number: int, summary: TripSummary) -> None:
        self._log.info("  Trip %d:", trip_number)
        self._log.info("    Start: %s", self._time(summary.start))
        self._log.info("    End: %s", self._time(summary.end))
        self._log.info("    Duration: %s", format_duration(summary.duration_seconds))
        self._log.info("    Data points: %d", summary.points)
        self._log.info(
            "    Average interval: %s", format_duration(summary.avg_interval_seconds)
        )
        self._log.info(
            "    Maximum interval: %s", format_duration(summary.max_interval_seconds)
        )
        self._log.info("    Max Speed: %.1f km/h", summary.max_speed_kmh)
        self._log.info("    Avg Speed: %.1f km/h", summary.avg_speed_kmh)

    def upload_succeeded(
        self, box: Box, trip_number: int, result: UploadResult, watermark: str
    ) -> None:
        self._log.info("    Successfully uploaded trip to OpenBikeSensor portal")
        self._log.info(
            "    Updated last update timestamp for box %s to: %s",
            box.box_id,
            watermark,
        )

    def upload_failed(self, box: Box, trip_number: int, result: UploadResult) -> None:
        self._log.warning(
            "    Failed to upload trip %d (status=%s): %s",
            trip_number,
            result.status_code,
            result.detail,
        )

    def track_written(self, box: Box, trip_number: int, path: str) -> None:
        self._log.info("    Wrote trip %d to %s", trip_number, path)

    def box_failed(self, box: Box, error: Exception) -> None:
        self._log.error("Box %s failed: %s", box.box_id, error)

    def run_finished(self, stats: RunStats) -> None:
        self._log.info(_RULE)
        self._log.info(
            "Done: boxes=%d trips=%d uploaded=%d failed_uploads=%d failed_boxes=%d",
            stats.boxes,
            stats.trips,
            stats.uploaded,
            stats.upload_failures,
            stats.boxes_failed,
        )


__all__ = ["LoggingObserver", "PipelineObserver"]
