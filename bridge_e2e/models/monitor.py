"""Monitor configuration, state and outcome types.

Outcomes are a tagged union (``Captured | TimedOut | Cancelled |
Failed``) so callers branch on the outcome type rather than on
error markers.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, Literal

from bridge_e2e.models import traffic

DEFAULT_MONITOR_TIMEOUT_MS = 30000

MonitorState = Literal["Pending", "Resolved", "TimedOut", "Failed", "Cancelled"]

OutcomeKind = Literal["captured", "timed_out", "cancelled", "failed"]


@dataclasses.dataclass(frozen=True)
class MonitorOptions:
    """Behaviour switches for one monitor.

    Attributes:
        one_time: Resolve on the first matching response, even
            before anyone waits.  Continuous monitors only resolve
            while a wait is outstanding.
        partial_match: Substring containment instead of equality
            for URL and RPC ``params.path`` matching.
        timeout_ms: Deadline after which the monitor times out on
            its own; ``0`` disables the timer.
        verbose: Log every match with its body.
        silent_timeout: Log the timeout at debug level only.
    """

    one_time: bool = False
    partial_match: bool = False
    timeout_ms: int = DEFAULT_MONITOR_TIMEOUT_MS
    verbose: bool = False
    silent_timeout: bool = False


@dataclasses.dataclass(frozen=True)
class MatchRule:
    """What a monitor is looking for.

    URL rules set ``path``.  RPC rules set ``rpc_method`` and
    optionally ``rpc_param_path``; ``None`` there means the rule
    correlates on method and id only.
    """

    path: str = ""
    http_method: str | None = None
    rpc_method: str | None = None
    rpc_param_path: str | None = None
    partial_match: bool = False

    @property
    def is_rpc(self) -> bool:
        return self.rpc_method is not None

    def describe(self) -> str:
        """Short human-readable form for log lines."""
        mode = "partial" if self.partial_match else "exact"
        method = f"{self.http_method} " if self.http_method else ""
        if self.is_rpc:
            path = f" path={self.rpc_param_path}" if self.rpc_param_path is not None else ""
            return f"{method}rpc={self.rpc_method}{path} ({mode})"
        return f"{method}{self.path} ({mode})"


# ── Outcomes ────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True)
class Captured:
    event: traffic.CapturedEvent


@dataclasses.dataclass(frozen=True)
class TimedOut:
    message: str


@dataclasses.dataclass(frozen=True)
class Cancelled:
    reason: str = "Monitor cancelled"


@dataclasses.dataclass(frozen=True)
class Failed:
    reason: str


MonitorOutcome = Captured | TimedOut | Cancelled | Failed


@dataclasses.dataclass
class Monitor:
    """A registered monitor, owned by the registry for its lifetime."""

    id: str
    rule: MatchRule
    options: MonitorOptions
    created_at: float
    future: asyncio.Future[MonitorOutcome]
    state: MonitorState = "Pending"
    timer: asyncio.TimerHandle | None = None
    armed: bool = False

    @property
    def pending(self) -> bool:
        return self.state == "Pending"


@dataclasses.dataclass(frozen=True)
class ApiResponseResult:
    """Decoded result of waiting on a monitor.

    ``kind`` is the outcome discriminant; ``success`` is true only
    for ``"captured"``.  ``response_time`` is milliseconds from
    registration to the end of the wait.
    """

    kind: OutcomeKind
    success: bool
    data: Any = None
    response_time: int = 0
    url: str | None = None
    status: int | None = None
    method: str | None = None
    request_id: Any = None
    error: str | None = None

    @property
    def timed_out(self) -> bool:
        return self.kind == "timed_out"

    @classmethod
    def from_outcome(cls, outcome: MonitorOutcome, response_time: int) -> ApiResponseResult:
        """Flatten a tagged outcome into the result callers consume."""
        if isinstance(outcome, Captured):
            event = outcome.event
            return cls(
                kind="captured",
                success=True,
                data=event.body,
                response_time=response_time,
                url=event.url,
                status=event.status_code,
                method=event.http_method,
                request_id=event.rpc_envelope.id if event.rpc_envelope else None,
            )
        if isinstance(outcome, TimedOut):
            return cls(kind="timed_out", success=False, response_time=response_time, error=outcome.message)
        if isinstance(outcome, Cancelled):
            return cls(kind="cancelled", success=False, response_time=response_time, error=outcome.reason)
        return cls(kind="failed", success=False, response_time=response_time, error=outcome.reason)
