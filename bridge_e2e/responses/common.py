"""Helpers shared by the REST endpoint decoders."""

from __future__ import annotations

from typing import Any

from bridge_e2e.utils import json_parsing

CREATED = 201


def has_body(data: Any) -> bool:
    """Whether a decoded body carries anything (``None`` and ``""`` do not)."""
    return data is not None and data != ""


def http_error_message(data: Any, status: int | None, label: str) -> str:
    """Best human-readable error for a non-201 response.

    String bodies that hold JSON are re-serialised compactly, other
    strings pass through, objects and arrays are serialised.  Anything
    else falls back to a generic status-code message.
    """
    message = ""
    if has_body(data):
        if isinstance(data, str):
            parsed = json_parsing.load_json(data)
            message = json_parsing.stringify(parsed) if parsed is not None else data
        elif isinstance(data, (dict, list)):
            message = json_parsing.stringify(data)
    return message or f"{label} request failed, status code: {status}"


def embedded_error(data: Any) -> str | None:
    """Serialised body if a structured 2xx body mentions an error."""
    if not isinstance(data, (dict, list)):
        return None
    text = json_parsing.stringify(data)
    if "error" in text or "Error" in text:
        return text
    return None
