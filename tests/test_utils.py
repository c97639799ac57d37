from datetime import datetime, timedelta, timezone

import pytest

from sense_to_obs.utils import (
    format_duration,
    format_iso_millis,
    format_local_time,
    mask_tail,
    parse_timestamp,
    round_half_up,
)


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (12.5, "12.5 seconds"),
        (90, "1.5 minutes"),
        (5400, "1.5 hours"),
        (36 * 3600, "1.5 days"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_round_half_up():
    assert round_half_up(2.5) == 3.0
    assert round_half_up(0.25, 1) == 0.3
    assert round_half_up(-2.5) == -3.0


def test_parse_timestamp_variants():
    assert parse_timestamp("2024-06-05T07:00:00.500Z") == datetime(2024, 6, 5, 7, 0, 0, 500000, tzinfo=timezone.utc)
    assert parse_timestamp("2024-06-05T09:00:00+02:00") == datetime(2024, 6, 5, 7, tzinfo=timezone.utc)
    assert parse_timestamp("2024-06-05T07:00:00") == datetime(2024, 6, 5, 7, tzinfo=timezone.utc)
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp("yesterday") is None


def test_format_iso_millis_converts_to_utc():
    value = datetime(2024, 6, 5, 9, 0, 0, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert format_iso_millis(value) == "2024-06-05T07:00:00.123Z"


def test_format_local_time():
    value = datetime(2024, 6, 5, 7, 0, tzinfo=timezone.utc)
    assert format_local_time(value, "Europe/Berlin") == "2024-06-05 09:00:00 CEST"


def test_mask_tail():
    assert mask_tail("abcdef123") == "****f123"
    assert mask_tail("") == ""
