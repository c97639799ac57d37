"""Track file encoding tests."""

from __future__ import annotations

import pytest

from sense_to_obs.matching import SpeedIndex, match_speeds
from sense_to_obs.models import DistanceEvent
from sense_to_obs.track_file import (
    TRACK_COLUMNS,
    build_metadata,
    encode_track_file,
    new_track_id,
    parse_track_file,
    render_field,
)
from sense_to_obs.track_rows import build_track_rows

from conftest import BOX_ID, make_distance, make_speed


def _rows():
    events = [make_distance(0, 1.5), make_distance(1, 0.0), make_distance(2, 0.8)]
    index = SpeedIndex([make_speed(0, 0.8), make_speed(1, 6.0)])
    return build_track_rows(match_speeds(events, index))


def test_layout_is_metadata_header_then_rows(fixed_ids):
    track = encode_track_file(_rows(), BOX_ID, fixed_ids)
    lines = track.content.split("\n")

    assert track.track_id == "track-1"
    assert track.row_count == 3
    assert lines[-1] == ""  # trailing newline
    assert lines[0] == "&".join(f"{k}={v}" for k, v in build_metadata(BOX_ID, "track-1").items())
    assert lines[1] == ";".join(TRACK_COLUMNS)
    assert len(lines) == 2 + 3 + 1
    assert "\r" not in track.content


def test_metadata_keys_and_order():
    metadata = build_metadata("box-1", "abc")
    assert list(metadata) == [
        "OBSDataFormat",
        "OBSFirmwareVersion",
        "DeviceId",
        "DataPerMeasurement",
        "MaximumMeasurementsPerLine",
        "OffsetLeft",
        "OffsetRight",
        "NumberOfDefinedPrivacyAreas",
        "TrackId",
        "PrivacyLevelApplied",
        "MaximumValidFlightTimeMicroseconds",
        "BluetoothEnabled",
        "PresetId",
        "DistanceSensorsUsed",
    ]
    assert metadata["OBSDataFormat"] == "2"
    assert metadata["DeviceId"] == "box-1"
    assert metadata["TrackId"] == "abc"


def test_row_lines_are_semicolon_separated(fixed_ids):
    track = encode_track_file(_rows(), BOX_ID, fixed_ids)
    first = track.content.split("\n")[2]
    assert first == (
        '05.06.2024;07:00:00;1717570800000;"";50.0826;8.24;112.0;"";2.9;"";"";"";150;"";0;"";0;0;58;1;0;8700;""'
    )


def test_round_trip_preserves_header_and_row_count(fixed_ids):
    rows = _rows()
    track = encode_track_file(rows, BOX_ID, fixed_ids)
    metadata, header, parsed_rows = parse_track_file(track.content)

    assert metadata["TrackId"] == "track-1"
    assert metadata["DeviceId"] == BOX_ID
    assert header == list(TRACK_COLUMNS)
    assert len(parsed_rows) == len(rows)
    assert all(len(r) == len(TRACK_COLUMNS) for r in parsed_rows)
    assert [r[14] for r in parsed_rows] == ["0", "0", "1"]


def test_encoding_is_deterministic_for_same_id():
    rows = _rows()
    first = encode_track_file(rows, BOX_ID, lambda: "same")
    second = encode_track_file(rows, BOX_ID, lambda: "same")
    assert first.content == second.content


def test_default_provider_generates_fresh_ids():
    rows = _rows()
    ids = {encode_track_file(rows, BOX_ID).track_id for _ in range(5)}
    assert len(ids) == 5
    assert len(new_track_id()) == 36


def test_empty_track_still_has_header(fixed_ids):
    track = encode_track_file([], BOX_ID, fixed_ids)
    metadata, header, rows = parse_track_file(track.content)
    assert header == list(TRACK_COLUMNS)
    assert rows == []


def test_placeholders_are_quoted_and_missing_altitude_is_bare(fixed_ids):
    event = DistanceEvent(BOX_ID, make_distance(0).timestamp, 50.0826, 8.24, None, 1.5)
    rows = build_track_rows([(event, make_speed(0, 6.0))])
    line = encode_track_file(rows, BOX_ID, fixed_ids).content.split("\n")[2]
    assert line == (
        '05.06.2024;07:00:00;1717570800000;"";50.0826;8.24;;"";21.6;"";"";"";150;"";1;"";0;0;58;1;0;8700;""'
    )


def test_unmatched_speed_is_written_as_empty_string(fixed_ids):
    rows = build_track_rows([(make_distance(0), None)])
    line = encode_track_file(rows, BOX_ID, fixed_ids).content.split("\n")[2]
    assert line.split(";")[8] == '""'


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        ("", '""'),
        (0, "0"),
        (21.6, "21.6"),
        ("a;b", '"a;b"'),
        ('say "hi"', '"say ""hi"""'),
    ],
)
def test_render_field(value, expected):
    assert render_field(value) == expected
