from datetime import datetime, timezone

from sense_to_obs.fetch_window import FetchWindow, compute_fetch_window, window_end


def test_window_ends_at_local_cutoff_in_summer():
    now = datetime(2024, 6, 5, 15, 30, tzinfo=timezone.utc)
    # 02:00 CEST is 00:00 UTC
    assert window_end(now, 2, "Europe/Berlin") == datetime(2024, 6, 5, 0, 0, tzinfo=timezone.utc)


def test_window_ends_at_local_cutoff_in_winter():
    now = datetime(2024, 1, 10, 15, 30, tzinfo=timezone.utc)
    assert window_end(now, 2, "Europe/Berlin") == datetime(2024, 1, 10, 1, 0, tzinfo=timezone.utc)


def test_negative_cutoff_disables_truncation():
    now = datetime(2024, 1, 10, 15, 30, tzinfo=timezone.utc)
    assert window_end(now, -1) == now
    assert window_end(now, None) == now


def test_window_params_use_iso_millis():
    window = compute_fetch_window(
        datetime(2024, 1, 1, 8, 0, 5, tzinfo=timezone.utc),
        datetime(2024, 1, 10, 15, 30, tzinfo=timezone.utc),
        cutoff_hour=2,
        tz_name="UTC",
    )
    assert window.as_params() == {
        "from-date": "2024-01-01T08:00:05.000Z",
        "to-date": "2024-01-10T02:00:00.000Z",
    }
    assert not window.is_empty


def test_window_is_empty_when_watermark_is_past_cutoff():
    start = datetime(2024, 1, 10, 3, 0, tzinfo=timezone.utc)
    end = datetime(2024, 1, 10, 2, 0, tzinfo=timezone.utc)
    assert FetchWindow(start, end).is_empty
