"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable factories for readings so
the trip, matching and export tests share one vocabulary.
"""
from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from sense_to_obs.models import DistanceEvent, SpeedEvent

BOX_ID = "5f0c0ffee0000000000000a1"
T0 = datetime(2024, 6, 5, 7, 0, 0, tzinfo=timezone.utc)


# --- Factory helpers -------------------------------------------------
def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def make_distance(seconds: float, distance_m: float = 1.2, box_id: str = BOX_ID) -> DistanceEvent:
    return DistanceEvent(
        device_id=box_id,
        timestamp=at(seconds),
        latitude=50.0826,
        longitude=8.2400,
        altitude=112.0,
        distance_m=distance_m,
    )


def make_speed(seconds: float, speed_ms: float = 5.0, box_id: str = BOX_ID) -> SpeedEvent:
    return SpeedEvent(device_id=box_id, timestamp=at(seconds), speed_ms=speed_ms)


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, status_code=200, data=None, text=None, headers=None):
        self.status_code = status_code
        self._data = data
        self._text = text
        self.headers = headers or {}
        self.url = "https://example.test"

    def json(self):
        if self._data is None:
            raise ValueError("No JSON object could be decoded")
        return self._data

    @property
    def text(self):
        if self._text is not None:
            return self._text
        return json.dumps(self._data)


class FixedIds:
    """Track id provider returning predictable ids."""

    def __init__(self, prefix: str = "track"):
        self.prefix = prefix
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        return f"{self.prefix}-{self.calls}"


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def fixed_ids():
    return FixedIds()
