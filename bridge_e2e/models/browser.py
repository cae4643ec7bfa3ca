"""Browser session result types."""

from __future__ import annotations

import pydantic


class NavigationResult(pydantic.BaseModel):
    """Result of a navigation attempt."""

    success: bool
    status_code: int | None = None
    status_text: str | None = None
    error_message: str | None = None
