"""
Console logger for harness runs: task-tagged, coloured, timed.

Several harness processes usually run side by side and their output
ends up interleaved, so every line names the task id of the run that
produced it.  Set ``WRITE_TO_FILE=true`` to also get an ANSI-free copy
of the run's lines in ``<logs_dir>/bridge-<task>_<timestamp>.log``.

Run state (task id, timers, line buffer, open log file) is one
``_RunState`` record held in a ``contextvars.ContextVar``; tasks
spawned by a run share its record, separate runs get their own.
"""

from __future__ import annotations

import contextvars
import dataclasses
import os
import pathlib
import re
import sys
import time
from datetime import UTC, datetime
from typing import TextIO

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")


@dataclasses.dataclass
class _RunState:
    task_id: str = "0"
    timers: dict[str, tuple[float, str]] = dataclasses.field(default_factory=dict)
    lines: list[str] = dataclasses.field(default_factory=list)
    log_file: TextIO | None = None
    log_file_path: str | None = None


_run_state_var: contextvars.ContextVar[_RunState] = contextvars.ContextVar("_run_state_var")


def _state() -> _RunState:
    try:
        return _run_state_var.get()
    except LookupError:
        state = _RunState()
        _run_state_var.set(state)
        return state


def _get_timers() -> dict[str, tuple[float, str]]:
    return _state().timers


def _get_log_buffer() -> list[str]:
    return _state().lines


def set_task_id(task_id: str) -> None:
    """Tag every subsequent log line of this run with *task_id*."""
    _state().task_id = task_id


def get_task_id() -> str:
    return _state().task_id


def get_log_buffer() -> list[str]:
    """Copy of the lines logged so far in this run, without colours."""
    return list(_state().lines)


def clear_log_buffer() -> None:
    state = _state()
    state.lines.clear()
    state.timers.clear()


# ============================================================================
# Log File
# ============================================================================


def start_log_file(task_id: str, logs_dir: str | os.PathLike[str] = ".logs") -> str | None:
    """Open this run's log file when ``WRITE_TO_FILE=true``.

    Any log file the run already had open is closed first.

    Returns:
        Path of the new file, or ``None`` when file logging is off
        or the file could not be opened.
    """
    if os.environ.get("WRITE_TO_FILE", "").lower() != "true":
        return None
    end_log_file()

    directory = pathlib.Path(logs_dir)
    directory.mkdir(parents=True, exist_ok=True)
    started = datetime.now(UTC)
    slug = re.sub(r"[^A-Za-z0-9.-]", "_", task_id)[:50]
    path = directory / f"bridge-{slug}_{started:%Y-%m-%d_%H-%M-%S}.log"

    try:
        handle = path.open("a", encoding="utf-8")
    except OSError as exc:
        print(f"\033[31m✗ [Logger] Cannot open log file {path}: {exc}\033[0m", file=sys.stderr)
        return None

    banner = "=" * 80
    handle.write(f"\n{banner}\n  Bridge Run Log - task {task_id}\n  Started: {started.isoformat()}\n{banner}\n")
    state = _state()
    state.log_file = handle
    state.log_file_path = str(path)
    print(f"\033[36mℹ [Logger] Logging to {path}\033[0m", file=sys.stderr)
    return str(path)


def end_log_file() -> None:
    """Close this run's log file, if one is open."""
    state = _state()
    handle, state.log_file, state.log_file_path = state.log_file, None, None
    if handle is None:
        return
    try:
        handle.close()
    except OSError:
        print("\033[33m⚠ [Logger] Log file did not close cleanly\033[0m", file=sys.stderr)


def _write_to_log_file(line: str) -> None:
    handle = _state().log_file
    if handle is not None:
        handle.write(_ANSI_RE.sub("", line) + "\n")
        handle.flush()


# ============================================================================
# Line Formatting
# ============================================================================

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_GRAY = "\033[90m"
_BLUE = "\033[34m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_MAGENTA = "\033[35m"

# level -> (colour, symbol)
_LEVELS: dict[str, tuple[str, str]] = {
    "info": (_CYAN, "ℹ"),
    "success": (_GREEN, "✓"),
    "warn": (_YELLOW, "⚠"),
    "error": (_RED, "✗"),
    "debug": (_GRAY, "•"),
    "timing": (_MAGENTA, "⏱"),
}

# Response bodies can be large; long strings are cut in log lines.
_MAX_VALUE_CHARS = 300


def _paint(text: str, colour: str) -> str:
    return f"{colour}{text}{_RESET}"


def _clock() -> str:
    """Current UTC time as ``HH:MM:SS.mmm``."""
    now = datetime.now(UTC)
    return f"{now:%H:%M:%S}.{now.microsecond // 1000:03d}"


def _human_duration(ms: float) -> str:
    if ms >= 60000:
        minutes, rest = divmod(ms, 60000)
        return f"{int(minutes)}m {rest / 1000:.1f}s"
    if ms >= 1000:
        return f"{ms / 1000:.2f}s"
    return f"{int(ms)}ms"


def _render(value: object) -> str:
    """Colour a data value by type; containers are summarised by size."""
    if value is None:
        return _paint("None", _DIM)
    if isinstance(value, bool):
        return _paint(str(value), _GREEN if value else _RED)
    if isinstance(value, (int, float)):
        return _paint(str(value), _YELLOW)
    if isinstance(value, str):
        if len(value) > _MAX_VALUE_CHARS:
            value = value[: _MAX_VALUE_CHARS - 3] + "..."
        return _paint(f'"{value}"', _GREEN)
    if isinstance(value, (list, tuple)):
        return _paint(f"[{len(value)} items]", _CYAN)
    if isinstance(value, dict):
        return _paint(f"{{{len(value)} keys}}", _CYAN)
    return str(value)


def _emit(line: str) -> None:
    print(line, file=sys.stderr)
    _write_to_log_file(line)
    _get_log_buffer().append(_ANSI_RE.sub("", line))


# ============================================================================
# Logger Class
# ============================================================================


class Logger:
    """Per-module logger.

    Lines look like ``[12:00:01.250] ✓ [TaskID: 3] [MonitorRegistry]
    Monitor monitor-2 resolved url="..." status=201``.
    """

    def __init__(self, context: str = "Harness") -> None:
        self._context = context

    def _log(self, level: str, message: str, data: dict[str, object] | None = None) -> None:
        colour, symbol = _LEVELS[level]
        parts = [
            _paint(f"[{_clock()}]", _GRAY),
            _paint(symbol, colour),
            _paint(f"[TaskID: {get_task_id()}]", _DIM),
            _paint(f"[{self._context}]", _BOLD),
            message,
        ]
        if data:
            parts.extend(f"{_paint(f'{key}=', _DIM)}{_render(value)}" for key, value in data.items())
        _emit(" ".join(parts))

    def info(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("info", message, data)

    def success(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("success", message, data)

    def warn(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("warn", message, data)

    def error(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("error", message, data)

    def debug(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("debug", message, data)

    # ==========================================================================
    # Timing
    # ==========================================================================

    def _timer_key(self, label: str) -> str:
        return f"{self._context}:{label}"

    def start_timer(self, label: str) -> None:
        """Start timing *label*; pair with :meth:`end_timer`."""
        _get_timers()[self._timer_key(label)] = (time.monotonic() * 1000, _clock())
        self._log("timing", f"Starting: {label}")

    def end_timer(self, label: str, message: str | None = None) -> float:
        """Stop timing *label* and log how long it took.

        Returns:
            Elapsed milliseconds, or ``0.0`` for a timer that was
            never started.
        """
        started = _get_timers().pop(self._timer_key(label), None)
        if started is None:
            self.warn(f'Timer "{label}" was not started')
            return 0.0

        started_ms, started_at = started
        elapsed = time.monotonic() * 1000 - started_ms
        self._log(
            "timing",
            f"{message or f'Completed: {label}'} {_paint('took', _DIM)} "
            f"{_paint(_human_duration(elapsed), _MAGENTA)} {_paint(f'(started {started_at})', _DIM)}",
        )
        return elapsed

    # ==========================================================================
    # Layout
    # ==========================================================================

    def section(self, title: str) -> None:
        """Banner for a major phase of the run."""
        rule = _paint("─" * 60, _BLUE)
        _emit("")
        _emit(rule)
        _emit(_paint(f"  {title}", _BLUE + _BOLD))
        _emit(rule)
        _emit("")

    def subsection(self, title: str) -> None:
        _emit(_paint(f"\n  ▸ {title}", _CYAN))


def create_logger(context: str) -> Logger:
    """Create a logger whose lines are tagged with *context*."""
    return Logger(context)
