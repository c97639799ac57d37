"""HTTP session factories for openSenseMap and portal calls."""

from __future__ import annotations

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import HTTP_BACKOFF_FACTOR, HTTP_MAX_RETRIES

__all__ = ["create_fetch_session", "create_upload_session"]


def _build_retry() -> Retry:
    return Retry(
        total=HTTP_MAX_RETRIES,
        backoff_factor=HTTP_BACKOFF_FACTOR,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
    )


def create_fetch_session() -> Session:
    """Session for read-only GETs, retried on transient server errors."""

    session = requests.Session()
    adapter = HTTPAdapter(max_retries=_build_retry())
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept-Encoding": "gzip, deflate",
            "Accept": "application/json",
        }
    )
    return session


def create_upload_session(user_agent: str) -> Session:
    """Session for track uploads. Uploads are attempted once per run."""

    session = requests.Session()
    adapter = HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": user_agent})
    return session
