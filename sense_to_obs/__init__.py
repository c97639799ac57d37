"""senseBox to OpenBikeSensor trip exporter."""

from .main import main
from .models import Box, DistanceEvent, SpeedEvent, TrackRow, Trip
from .errors import ConfigurationError, SenseToObsError

__all__ = [
    "main",
    "Box",
    "DistanceEvent",
    "SpeedEvent",
    "TrackRow",
    "Trip",
    "ConfigurationError",
    "SenseToObsError",
]
