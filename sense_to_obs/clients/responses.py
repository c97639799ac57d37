"""Shared HTTP response helpers."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import requests

__all__ = ["extract_error", "safe_json"]

_SNIPPET_LIMIT = 200


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return a compact error description from a failed response, if any."""

    if resp is None:
        return None
    data = safe_json(resp)
    if isinstance(data, dict):
        parts = _collect_error_parts(data)
        if parts:
            return " | ".join(parts)
    return _extract_error_text(resp)


def safe_json(resp: requests.Response) -> Optional[Any]:
    """Parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except ValueError as exc:
        logging.debug(
            "Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc
        )
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    if len(trimmed) > _SNIPPET_LIMIT:
        return trimmed[:_SNIPPET_LIMIT] + "..."
    return trimmed


def _collect_error_parts(data: dict) -> List[str]:
    # openSenseMap answers {"code": ..., "message": ...}; the portal uses
    # {"errors": [...]} or {"message": ...}.
    parts: List[str] = []
    code = data.get("code")
    if code:
        parts.append(str(code))
    message = data.get("message")
    if message:
        parts.append(str(message))
    errors = data.get("errors")
    if isinstance(errors, list):
        parts.extend(str(err) for err in errors if err)
    elif isinstance(errors, dict):
        parts.extend(f"{key}:{value}" for key, value in errors.items())
    return parts
