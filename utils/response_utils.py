"""Helpers for turning upstream HTTP responses into tool payloads.

`decode_body` mirrors what a JSON-aware HTTP client does: JSON bodies become
Python objects, anything else stays text, and an empty body is `None`.
The `*_error_message` helpers pull the most specific message each upstream
service puts in its error bodies, falling back to the transport error text.
"""
from __future__ import annotations

import json
from typing import Any

import httpx


def robust_parse_text(text: str) -> Any:
    """Parse text as JSON, then as the first JSON value in the text, else return it unchanged."""
    try:
        return json.loads(text)
    except ValueError:
        pass

    try:
        obj, _ = json.JSONDecoder().raw_decode(text.lstrip())
        return obj
    except ValueError:
        pass

    return text


def decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    return robust_parse_text(response.text)


def to_text(payload: Any) -> str:
    """Render a tool payload the way it is sent back to the caller."""
    return json.dumps(payload, indent=2, default=str)


def _response_data(exc: Exception) -> Any:
    if isinstance(exc, httpx.HTTPStatusError):
        return decode_body(exc.response)
    return None


def transport_message(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def oauth_error_message(exc: Exception) -> str:
    """OAuth token endpoint: `{"error": ..., "error_description": ...}`."""
    data = _response_data(exc)
    if isinstance(data, dict) and data.get("error_description"):
        return str(data["error_description"])
    return transport_message(exc)


def salesforce_error_message(exc: Exception) -> str:
    """Salesforce REST: `[{"message": ..., "errorCode": ...}, ...]`."""
    data = _response_data(exc)
    if isinstance(data, list) and data and isinstance(data[0], dict) and data[0].get("message"):
        return str(data[0]["message"])
    return transport_message(exc)


def postman_error_message(exc: Exception) -> str:
    """Postman API: `{"message": ...}` or `{"error": {"name": ..., "message": ...}}`."""
    data = _response_data(exc)
    if isinstance(data, dict):
        if data.get("message"):
            return str(data["message"])
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return transport_message(exc)
