"""Track upload to an OpenBikeSensor portal."""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

import requests

from ..config import (
    OBS_API_KEY,
    OBS_HOST,
    OBS_TRACK_DESCRIPTION,
    OBS_UPLOAD_PATH,
    OBS_USER_AGENT,
    REQUEST_TIMEOUT,
)
from ..errors import ObsUploadError
from ..models import TrackFile, UploadResult
from ..utils import mask_tail
from .responses import extract_error
from .session import create_upload_session

LOGGER = logging.getLogger(__name__)

MultipartFields = List[Tuple[str, Tuple[str | None, str] | Tuple[str, str, str]]]


def track_title(box_id: str, trip_number: int) -> str:
    return f"AutoUpload trip_{box_id}_{trip_number}"


def track_filename(box_id: str, trip_number: int) -> str:
    return f"senseBox_trip_{box_id}_{trip_number}.csv"


def build_multipart_fields(
    track: TrackFile, box_id: str, trip_number: int
) -> MultipartFields:
    """Form parts in portal order: title, description, body."""

    return [
        ("title", (None, track_title(box_id, trip_number))),
        ("description", (None, OBS_TRACK_DESCRIPTION)),
        ("body", (track_filename(box_id, trip_number), track.content, "text/csv")),
    ]


class ObsPortalClient:
    def __init__(
        self,
        host: str = OBS_HOST,
        api_key: str = OBS_API_KEY,
        *,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.host = host.rstrip("/")
        self.api_key = api_key
        self.session = session or create_upload_session(OBS_USER_AGENT)
        self.timeout = timeout

    @property
    def upload_url(self) -> str:
        return f"{self.host}{OBS_UPLOAD_PATH}"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"OBSUserId {self.api_key}"}

    def _post(self, fields: MultipartFields) -> requests.Response:
        try:
            resp = self.session.post(
                self.upload_url,
                headers=self._auth_headers(),
                files=fields,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ObsUploadError(f"transport error: {exc}") from exc
        if not 200 <= resp.status_code < 300:
            detail = extract_error(resp)
            message = f"status {resp.status_code}"
            raise ObsUploadError(
                f"{message} | {detail}" if detail else message,
                status_code=resp.status_code,
            )
        return resp

    def upload_track(
        self, track: TrackFile, box_id: str, trip_number: int
    ) -> UploadResult:
        """Upload one track; never raises for transport or status failures.

        ``trip_number`` is 1-based and only used for the title and filename.
        """
        LOGGER.debug(
            "POST %s box=%s trip=%d rows=%d api_key=%s",
            self.upload_url,
            box_id,
            trip_number,
            track.row_count,
            mask_tail(self.api_key),
        )
        try:
            resp = self._post(build_multipart_fields(track, box_id, trip_number))
        except ObsUploadError as exc:
            LOGGER.error(
                "Failed to upload trip %d for box=%s: %s", trip_number, box_id, exc
            )
            return UploadResult(
                success=False,
                status_code=exc.status_code,
                detail=str(exc),
            )
        LOGGER.info(
            "Uploaded trip %d for box=%s (status=%s)",
            trip_number,
            box_id,
            resp.status_code,
        )
        return UploadResult(success=True, status_code=resp.status_code)


__all__ = [
    "ObsPortalClient",
    "build_multipart_fields",
    "track_filename",
    "track_title",
]
