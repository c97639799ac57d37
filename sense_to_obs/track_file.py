"""OBS track file (CSV flavour, data format 2) encoding and parsing.

Layout::

    OBSDataFormat=2&OBSFirmwareVersion=...&TrackId=<uuid>&...
    Date;Time;Millis;Comment;Latitude;...;Tms1;Lus1;Rus1
    05.06.2024;07:12:03;1717571523000;"";50.08;8.24;112.0;"";21.6;...

Fields are separated by ``;`` and lines end with ``\\n``. An empty string is
written as ``""`` and a missing value (``None``) is left bare. Other values
are quoted only when they contain the separator, a quote or a line break.
The metadata line is a single field.
"""

from __future__ import annotations

import csv
import io
import uuid
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from .models import TrackFile, TrackRow

TrackIdProvider = Callable[[], str]

FIELD_SEPARATOR = ";"
LINE_TERMINATOR = "\n"
QUOTE_CHAR = '"'
_QUOTE_TRIGGERS = (FIELD_SEPARATOR, QUOTE_CHAR, "\r", "\n")

TRACK_COLUMNS: Tuple[str, ...] = (
    "Date",
    "Time",
    "Millis",
    "Comment",
    "Latitude",
    "Longitude",
    "Altitude",
    "Course",
    "Speed",
    "HDOP",
    "Satellites",
    "BatteryLevel",
    "Left",
    "Right",
    "Confirmed",
    "Marked",
    "Invalid",
    "InsidePrivacyArea",
    "Factor",
    "Measurements",
    "Tms1",
    "Lus1",
    "Rus1",
)


def new_track_id() -> str:
    return str(uuid.uuid4())


def render_field(value: object) -> str:
    if value is None:
        return ""
    text = str(value)
    if text == "" or any(ch in text for ch in _QUOTE_TRIGGERS):
        return QUOTE_CHAR + text.replace(QUOTE_CHAR, QUOTE_CHAR * 2) + QUOTE_CHAR
    return text


def render_line(values: Iterable[object]) -> str:
    return FIELD_SEPARATOR.join(render_field(value) for value in values) + LINE_TERMINATOR


def build_metadata(device_id: str, track_id: str) -> Dict[str, str]:
    return {
        "OBSDataFormat": "2",
        "OBSFirmwareVersion": "SenseBoxToOBS",
        "DeviceId": device_id,
        "DataPerMeasurement": "1",
        "MaximumMeasurementsPerLine": "1",
        "OffsetLeft": "0",
        "OffsetRight": "0",
        "NumberOfDefinedPrivacyAreas": "0",
        "TrackId": track_id,
        "PrivacyLevelApplied": "AbsolutePrivacy",
        "MaximumValidFlightTimeMicroseconds": "18560",
        "BluetoothEnabled": "0",
        "PresetId": "default",
        "DistanceSensorsUsed": "Sensebox-Overtaking-Distance",
    }


def encode_track_file(
    rows: Sequence[TrackRow],
    device_id: str,
    track_id_provider: TrackIdProvider = new_track_id,
) -> TrackFile:
    """Serialise ``rows`` into a complete track file.

    The output depends only on the inputs and the id returned by
    ``track_id_provider``, which is called exactly once per file.
    """
    track_id = track_id_provider()
    metadata = build_metadata(device_id, track_id)
    lines = [
        render_line(["&".join(f"{key}={value}" for key, value in metadata.items())]),
        render_line(TRACK_COLUMNS),
    ]
    lines.extend(render_line(row.as_fields()) for row in rows)
    return TrackFile(track_id=track_id, content="".join(lines), row_count=len(rows))


def parse_track_file(
    content: str,
) -> Tuple[Dict[str, str], List[str], List[List[str]]]:
    """Split a track file into (metadata, header, rows). Values stay strings."""

    reader = csv.reader(io.StringIO(content), delimiter=FIELD_SEPARATOR)
    lines = [line for line in reader if line]
    if len(lines) < 2:
        raise ValueError("track file needs a metadata line and a header line")
    metadata: Dict[str, str] = {}
    for pair in FIELD_SEPARATOR.join(lines[0]).split("&"):
        key, _, value = pair.partition("=")
        if key:
            metadata[key] = value
    return metadata, lines[1], lines[2:]


__all__ = [
    "FIELD_SEPARATOR",
    "LINE_TERMINATOR",
    "TRACK_COLUMNS",
    "TrackIdProvider",
    "build_metadata",
    "encode_track_file",
    "new_track_id",
    "parse_track_file",
    "render_field",
    "render_line",
]
