"""JSON helpers for captured request and response payloads."""

from __future__ import annotations

import json
from typing import Any


def load_json(text: str | bytes | None) -> Any:
    """Parse JSON text, tolerating surrounding whitespace.

    Args:
        text: Raw payload text or bytes.

    Returns:
        Parsed JSON value, or ``None`` on failure.
    """
    if text is None:
        return None
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    content = text.strip()
    if not content:
        return None
    try:
        return json.loads(content)
    except (json.JSONDecodeError, ValueError):
        return None


def decode_body(raw: str | bytes | None) -> Any:
    """Decode a captured body into JSON when possible, else plain text.

    Empty or whitespace-only bodies decode to ``None``.  Anything
    that is not valid JSON is returned as text so malformed payloads
    degrade instead of raising.
    """
    if raw is None:
        return None
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    if not text.strip():
        return None
    parsed = load_json(text)
    if parsed is None and text.strip() != "null":
        return text
    return parsed


def stringify(value: Any) -> str:
    """Serialise *value* as compact JSON.

    Matches the compact, non-ASCII-escaping form that browser
    ``JSON.stringify`` produces so substring checks on the text
    behave the same as on the wire.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
