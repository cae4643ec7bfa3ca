"""Pydantic models for the bridge operation input and its result record.

All models serialise with camelCase aliases, which is the shape of
the persisted result files.
"""

from __future__ import annotations

import time
from typing import Any, Literal

import pydantic

from bridge_e2e.utils import serialization

TestProgress = Literal["Untested", "RouteTested", "SignTested"]

PreviewButtonStatus = Literal["enabled", "disabled", "not_found"]

_PROGRESS_RANK: dict[str, int] = {"Untested": 0, "RouteTested": 1, "SignTested": 2}


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class BridgeOperationInput(pydantic.BaseModel):
    """Parameters of one bridge operation."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    amount: str
    from_chain: str = "interwoven"
    from_token: str = "USDC"
    to_chain: str = "interwoven"
    to_token: str = "INIT"
    route_type: str = "Minitswap"
    target_address: str | None = None


class ResponseRecord(pydantic.BaseModel):
    """Snapshot of one captured API response, written once."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True, frozen=True
    )

    endpoint: str
    method: str = "POST"
    status: int = 0
    success: bool = False
    data: Any = None
    timestamp: int = pydantic.Field(default_factory=now_ms)
    response_time: int = 0


class Timing(pydantic.BaseModel):
    """Wall-clock timing of an operation, in epoch milliseconds."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    start_time: int = pydantic.Field(default_factory=now_ms)
    end_time: int = 0
    duration: int = 0


class BridgeOperationResult(pydantic.BaseModel):
    """Aggregate built up across the stages of one bridge operation.

    ``success`` stays ``None`` until it is set explicitly or derived
    during finalization.  ``test_progress`` only moves forward; use
    :meth:`advance_progress` rather than assigning it.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    success: bool | None = None
    test_progress: TestProgress = "Untested"
    route_pass: bool | None = None
    error: str | None = None
    transaction_hash: str | None = None
    api_responses: dict[str, ResponseRecord] = pydantic.Field(default_factory=dict)
    preview: dict[str, Any] = pydantic.Field(default_factory=dict)
    timing: Timing = pydantic.Field(default_factory=Timing)
    screenshots: list[str] = pydantic.Field(default_factory=list)

    _finalized: bool = pydantic.PrivateAttr(default=False)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def advance_progress(self, stage: TestProgress) -> TestProgress:
        """Move ``test_progress`` forward to *stage*; never backwards.

        Returns:
            The progress value after the call.
        """
        if _PROGRESS_RANK[stage] > _PROGRESS_RANK[self.test_progress]:
            self.test_progress = stage
        return self.test_progress

    def finalize(
        self,
        *,
        success: bool | None = None,
        test_progress: TestProgress | None = None,
        route_pass: bool | None = None,
        end_time: int | None = None,
    ) -> BridgeOperationResult:
        """Stamp timing, apply explicit overrides and derive ``success``.

        May run only once per result.  ``success`` is derived only if
        no stage set it: an error or a failed route makes it false,
        otherwise it defaults to true.

        Raises:
            RuntimeError: If the result was already finalized.
        """
        if self._finalized:
            raise RuntimeError("Bridge operation result already finalized")
        self._finalized = True

        self.timing.end_time = end_time if end_time is not None else now_ms()
        self.timing.duration = self.timing.end_time - self.timing.start_time

        if success is not None:
            self.success = success
        if test_progress is not None:
            self.advance_progress(test_progress)
        if route_pass is not None:
            self.route_pass = route_pass

        if self.success is None and (self.error or self.route_pass is False):
            self.success = False
        if self.success is None:
            self.success = True
        return self
