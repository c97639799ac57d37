"""Central error types used across the application."""

from __future__ import annotations


class SenseToObsError(RuntimeError):
    """Base error for the exporter."""


class ConfigurationError(SenseToObsError):
    """Raised when required settings are missing; aborts the run."""


class OpenSenseMapError(SenseToObsError):
    """Raised when openSenseMap returns an unusable response."""


class ObsUploadError(SenseToObsError):
    """Raised when the OpenBikeSensor portal rejects or fails an upload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "SenseToObsError",
    "ConfigurationError",
    "OpenSenseMapError",
    "ObsUploadError",
]
