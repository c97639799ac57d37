"""openSenseMap API access: box discovery and raw reading download.

Every public method returns an empty list when the API misbehaves (network
failure, error status, malformed payload). The failure is logged and the run
carries on with the next call.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from ..config import (
    BOX_GROUP_TAGS,
    DISTANCE_PHENOMENON,
    OPENSENSEMAP_BASE_URL,
    REQUEST_TIMEOUT,
    SPEED_PHENOMENON,
)
from ..errors import OpenSenseMapError
from ..fetch_window import FetchWindow
from ..models import Box, DistanceEvent, SpeedEvent
from ..utils import parse_timestamp
from .responses import extract_error
from .session import create_fetch_session

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DATA_COLUMNS = (
    "createdAt",
    "value",
    "lat",
    "lon",
    "height",
    "boxId",
    "boxName",
    "exposure",
    "sensorId",
    "phenomenon",
    "unit",
    "sensorType",
)


def _optional_float(value: Any) -> float | None:
    """Float of ``value``; None when missing, unparsable, NaN or infinite."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _optional_coordinate(value: Any) -> float | int | None:
    """Like ``_optional_float`` but integral JSON numbers stay ``int``.

    Coordinates are copied into track rows as given, so ``50`` must not turn
    into ``50.0``.
    """
    number = _optional_float(value)
    if number is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    return number


def parse_distance_event(row: Dict[str, Any], box_id: str) -> DistanceEvent | None:
    """Build a DistanceEvent from one ``/boxes/data`` row; None if unusable."""

    timestamp = parse_timestamp(row.get("createdAt"))
    distance = _optional_float(row.get("value"))
    if timestamp is None or distance is None:
        return None
    return DistanceEvent(
        device_id=str(row.get("boxId") or box_id),
        timestamp=timestamp,
        latitude=_optional_coordinate(row.get("lat")),
        longitude=_optional_coordinate(row.get("lon")),
        altitude=_optional_coordinate(row.get("height")),
        distance_m=max(distance, 0.0),
    )


def parse_speed_event(row: Dict[str, Any], box_id: str) -> SpeedEvent | None:
    timestamp = parse_timestamp(row.get("createdAt"))
    speed = _optional_float(row.get("value"))
    if timestamp is None or speed is None:
        return None
    return SpeedEvent(
        device_id=str(row.get("boxId") or box_id), timestamp=timestamp, speed_ms=speed
    )


class OpenSenseMapClient:
    def __init__(
        self,
        base_url: str = OPENSENSEMAP_BASE_URL,
        *,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        group_tags: str = BOX_GROUP_TAGS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or create_fetch_session()
        self.timeout = timeout
        self.group_tags = group_tags

    # --- HTTP ----------------------------------------------------------
    def _get_json(self, path: str, params: Dict[str, Any], context: str) -> Any:
        url = f"{self.base_url}{path}"
        LOGGER.debug("GET %s params=%s", url, params)
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise OpenSenseMapError(f"{context}: request failed: {exc}") from exc
        if not 200 <= resp.status_code < 300:
            detail = extract_error(resp)
            message = f"{context}: status {resp.status_code}"
            raise OpenSenseMapError(f"{message} | {detail}" if detail else message)
        try:
            return resp.json()
        except ValueError as exc:
            raise OpenSenseMapError(f"{context}: invalid JSON: {exc}") from exc

    def _get_list(self, path: str, params: Dict[str, Any], context: str) -> List[Any]:
        try:
            data = self._get_json(path, params, context)
        except OpenSenseMapError as exc:
            LOGGER.error("%s", exc)
            return []
        if not isinstance(data, list):
            LOGGER.error(
                "%s: unexpected JSON shape type=%s", context, type(data).__name__
            )
            return []
        return data

    # --- Boxes ---------------------------------------------------------
    def fetch_boxes(self) -> List[Box]:
        params = {
            "phenomenon": DISTANCE_PHENOMENON,
            "format": "json",
            "grouptag": self.group_tags,
            "minimal": "true",
        }
        boxes: List[Box] = []
        for item in self._get_list("/boxes", params, "Fetching boxes"):
            if not isinstance(item, dict) or not item.get("_id"):
                continue
            boxes.append(Box(box_id=str(item["_id"]), name=str(item.get("name") or "")))
        LOGGER.info("Fetched %d boxes (grouptag=%s)", len(boxes), self.group_tags)
        return boxes

    # --- Readings ------------------------------------------------------
    def fetch_distance_events(
        self, box_id: str, window: FetchWindow
    ) -> List[DistanceEvent]:
        return self._fetch_events(
            box_id, DISTANCE_PHENOMENON, window, parse_distance_event
        )

    def fetch_speed_events(self, box_id: str, window: FetchWindow) -> List[SpeedEvent]:
        return self._fetch_events(box_id, SPEED_PHENOMENON, window, parse_speed_event)

    def _fetch_events(
        self,
        box_id: str,
        phenomenon: str,
        window: FetchWindow,
        parse: Callable[[Dict[str, Any], str], Optional[T]],
    ) -> List[T]:
        if window.is_empty:
            LOGGER.info(
                "Empty fetch window for box=%s phenomenon=%s (%s >= %s)",
                box_id,
                phenomenon,
                window.start.isoformat(),
                window.end.isoformat(),
            )
            return []
        params = {
            "boxId": box_id,
            "phenomenon": phenomenon,
            "columns": ",".join(DATA_COLUMNS),
            "format": "json",
            **window.as_params(),
        }
        context = f"Fetching {phenomenon} data for box {box_id}"
        rows = self._get_list("/boxes/data", params, context)
        events: List[T] = []
        skipped = 0
        for row in rows:
            event = parse(row, box_id) if isinstance(row, dict) else None
            if event is None:
                skipped += 1
                continue
            events.append(event)
        if skipped:
            LOGGER.warning(
                "Skipped %d malformed %s rows for box=%s", skipped, phenomenon, box_id
            )
        LOGGER.info(
            "Fetched %d %s readings for box=%s from %s to %s",
            len(events),
            phenomenon,
            box_id,
            params["from-date"],
            params["to-date"],
        )
        return events


__all__ = [
    "DATA_COLUMNS",
    "OpenSenseMapClient",
    "parse_distance_event",
    "parse_speed_event",
]
