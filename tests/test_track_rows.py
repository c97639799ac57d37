from datetime import datetime, timezone

import pytest

from sense_to_obs.models import DistanceEvent
from sense_to_obs.track_file import TRACK_COLUMNS
from sense_to_obs.track_rows import (
    build_track_row,
    distance_to_cm,
    is_confirmed,
    speed_to_kmh,
)

from conftest import make_distance, make_speed


@pytest.mark.parametrize(
    "distance_m, speed_kmh, expected",
    [
        (1.5, 3.0, 0),
        (1.5, 20.0, 1),
        (0.0, None, 0),
        (0.8, None, 1),
        (0.0, 20.0, 0),
        (1.5, 5.0, 1),
        (1.5, 4.9, 0),
    ],
)
def test_confirmed_rule(distance_m, speed_kmh, expected):
    assert is_confirmed(distance_m, speed_kmh) == expected


def test_unit_conversions_round_half_away_from_zero():
    assert speed_to_kmh(None) is None
    assert speed_to_kmh(1.25) == 4.5
    assert speed_to_kmh(5.0) == 18.0
    assert speed_to_kmh(2.0) == 7.2
    assert distance_to_cm(1.5) == 150
    assert distance_to_cm(0.805) == 81
    assert distance_to_cm(0.0) == 0


def test_row_with_matched_speed():
    event = DistanceEvent(
        device_id="box",
        timestamp=datetime(2024, 6, 5, 7, 12, 3, 250000, tzinfo=timezone.utc),
        latitude=50.08,
        longitude=8.24,
        altitude=112.5,
        distance_m=1.23,
    )
    speed = make_speed(0, 6.0)
    row = build_track_row(event, speed)
    fields = dict(zip(TRACK_COLUMNS, row.as_fields()))

    assert fields["Date"] == "05.06.2024"
    assert fields["Time"] == "07:12:03"
    assert fields["Millis"] == 1717571523250
    assert fields["Latitude"] == 50.08
    assert fields["Longitude"] == 8.24
    assert fields["Altitude"] == 112.5
    assert fields["Speed"] == 21.6
    assert fields["Left"] == 123
    assert fields["Confirmed"] == 1
    assert fields["Factor"] == 58
    assert fields["Measurements"] == 1
    assert fields["Invalid"] == 0
    assert fields["InsidePrivacyArea"] == 0
    assert fields["Tms1"] == 0
    assert fields["Lus1"] == 123 * 58
    for blank in ("Comment", "Course", "HDOP", "Satellites", "BatteryLevel", "Right", "Marked", "Rus1"):
        assert fields[blank] == ""


def test_row_without_speed_leaves_speed_blank():
    row = build_track_row(make_distance(0, 0.0), None)
    fields = dict(zip(TRACK_COLUMNS, row.as_fields()))
    assert fields["Speed"] == ""
    assert fields["Left"] == 0
    assert fields["Lus1"] == 0
    assert fields["Confirmed"] == 0


def test_row_has_one_value_per_column():
    row = build_track_row(make_distance(0), make_speed(0))
    assert len(row.as_fields()) == len(TRACK_COLUMNS) == 23


def test_missing_altitude_stays_none():
    event = DistanceEvent("box", make_distance(0).timestamp, 50.0, 8.0, None, 1.0)
    fields = dict(zip(TRACK_COLUMNS, build_track_row(event, None).as_fields()))
    assert fields["Altitude"] is None
