"""Shared serialization helpers for camelCase conversion.

Provides a single ``snake_to_camel`` implementation used by the
Pydantic model configs, and a dump helper for the persisted
result files.
"""

from __future__ import annotations

from typing import Any

import pydantic


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as
            ``"my_field_name"``.

    Returns:
        The camelCase equivalent, e.g. ``"myFieldName"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


def to_camel_dict(model: pydantic.BaseModel) -> dict[str, Any]:
    """Dump *model* to a JSON-compatible dict keyed by camelCase aliases."""
    return model.model_dump(mode="json", by_alias=True)
