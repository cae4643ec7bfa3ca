"""
Monitor registry: named, time-bounded waits on network events.

One registry is bound to one page and owns every monitor registered
on it.  Traffic reaches the registry as ``CapturedEvent`` messages on
a queue (see :mod:`bridge_e2e.monitoring.recorder`), drained by a
single consumer task, so all matching, timer callbacks and state
changes run on the event loop thread and never interleave mid-update.

Monitor lifecycle::

    register ──► Pending ──► Resolved | TimedOut | Failed | Cancelled
                    │
                    └── wait()/cancel() removes it from the registry

A monitor changes state exactly once: every transition goes through
``_settle``, which checks ``Pending`` before mutating.  When a match
and a deadline race, whichever reaches ``_settle`` first wins.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import itertools
import time

from playwright import async_api

from bridge_e2e.models import monitor as monitor_models
from bridge_e2e.models import traffic
from bridge_e2e.monitoring import matcher, recorder
from bridge_e2e.utils import errors, json_parsing, logger

log = logger.create_logger("MonitorRegistry")

DEFAULT_WAIT_TIMEOUT_MS = 30000

# Body preview length for verbose match logging.
_VERBOSE_BODY_CHARS = 300


class MonitorNotFoundError(LookupError):
    """Raised when waiting on a monitor id that is not registered."""

    def __init__(self, monitor_id: str) -> None:
        super().__init__(f"Monitor {monitor_id} does not exist")
        self.monitor_id = monitor_id


class MonitorRegistry:
    """Owns the monitors and traffic logs of one page.

    Usage::

        registry = MonitorRegistry()
        registry.attach(page)
        monitor_id = registry.register_path("route", "POST", MonitorOptions(one_time=True))
        await click_something()
        result = await registry.wait(monitor_id, 5000)
        await registry.close()
    """

    def __init__(self) -> None:
        self._monitors: dict[str, monitor_models.Monitor] = {}
        self._traffic = recorder.TrafficLog()
        self._queue: asyncio.Queue[recorder.QueueItem] = asyncio.Queue()
        self._consumer: asyncio.Task[None] | None = None
        self._recorder: recorder.TrafficRecorder | None = None
        self._page: async_api.Page | None = None
        self._ids = itertools.count(1)

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def attach(self, page: async_api.Page, show_verbose: bool = False) -> None:
        """Start recording *page* traffic and draining it into monitors."""
        if self._recorder is not None:
            return
        self._page = page
        self._recorder = recorder.TrafficRecorder(
            page, self.submit, wants_body=self.wants_body, show_verbose=show_verbose
        )
        self._recorder.attach()
        page.on("close", self._on_page_close)
        self.start()

    def start(self) -> None:
        """Start the queue consumer (idempotent)."""
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.get_running_loop().create_task(self._drain())

    async def close(self) -> None:
        """Cancel all monitors, stop recording and stop the consumer."""
        self.cancel_all()
        if self._recorder is not None:
            self._recorder.detach()
            self._recorder = None
        if self._page is not None:
            self._page.remove_listener("close", self._on_page_close)
            self._page = None
        if self._consumer is not None:
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None

    def _on_page_close(self, _page: object = None) -> None:
        count = self.cancel_all()
        if count:
            log.info("Page closed, cancelled active monitors", {"count": count})

    # ==========================================================================
    # Event Intake
    # ==========================================================================

    def submit(self, item: recorder.QueueItem) -> None:
        """Queue a captured event (or a task producing one) for matching."""
        self._queue.put_nowait(item)

    async def flush(self) -> None:
        """Wait until every queued event has been matched."""
        await self._queue.join()

    async def _drain(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if isinstance(item, asyncio.Task):
                    await asyncio.wait([item])
                    if item.cancelled():
                        continue
                    event = item.result()
                else:
                    event = item
                self.on_traffic_event(event)
            except Exception as error:
                log.warn("Dropped traffic event", {"error": errors.get_error_message(error)})
            finally:
                self._queue.task_done()

    def wants_body(self, url: str, http_method: str) -> bool:
        """Whether some registered URL monitor would match this response."""
        return any(matcher.url_matches(url, http_method, m.rule) for m in self._monitors.values())

    def on_traffic_event(self, event: traffic.CapturedEvent) -> None:
        """Match one event against every registered monitor.

        Matches are appended to the monitor's private log.  Responses
        resolve a monitor that is still pending and armed; later
        matches are logged but do not resolve it again.
        """
        self._traffic.record(event)
        for mon in list(self._monitors.values()):
            if not matcher.matches(event, mon.rule):
                continue
            self._traffic.record_for(mon.id, event)
            if mon.options.verbose:
                log.info(
                    f"Matched {event.kind} for monitor {mon.id}",
                    {
                        "url": event.url,
                        "status": event.status_code,
                        "rule": mon.rule.describe(),
                        "body": _preview(event.body),
                    },
                )
            if event.kind == "response" and mon.armed and self._settle(
                mon, "Resolved", monitor_models.Captured(event)
            ):
                log.success(f"Monitor {mon.id} resolved", {"url": event.url, "status": event.status_code})

    # ==========================================================================
    # Registration
    # ==========================================================================

    def register(
        self,
        rule: monitor_models.MatchRule,
        options: monitor_models.MonitorOptions | None = None,
        monitor_id: str | None = None,
    ) -> str:
        """Create a pending monitor and start its deadline timer.

        One-time monitors are armed straight away, so the first
        matching response resolves them even before ``wait`` runs.
        Continuous monitors are armed by ``wait``.

        Raises:
            ValueError: If *monitor_id* is already registered.
        """
        options = options or monitor_models.MonitorOptions()
        monitor_id = monitor_id or f"monitor-{next(self._ids)}"
        if monitor_id in self._monitors:
            raise ValueError(f"Monitor {monitor_id} is already registered")

        loop = asyncio.get_running_loop()
        mon = monitor_models.Monitor(
            id=monitor_id,
            rule=dataclasses.replace(rule, partial_match=options.partial_match),
            options=options,
            created_at=time.monotonic(),
            future=loop.create_future(),
            armed=options.one_time,
        )
        if options.timeout_ms > 0:
            mon.timer = loop.call_later(options.timeout_ms / 1000, self._on_timeout, monitor_id)
        self._monitors[monitor_id] = mon
        self._traffic.open(monitor_id)

        announce = log.info if options.verbose else log.debug
        announce(
            f"Monitoring {mon.rule.describe()}",
            {"id": monitor_id, "oneTime": options.one_time, "timeoutMs": options.timeout_ms},
        )
        return monitor_id

    def register_path(
        self,
        path: str,
        http_method: str | None = None,
        options: monitor_models.MonitorOptions | None = None,
        monitor_id: str | None = None,
    ) -> str:
        """Watch responses whose URL matches *path*."""
        return self.register(monitor_models.MatchRule(path=path, http_method=http_method), options, monitor_id)

    def register_rpc(
        self,
        rpc_method: str,
        param_path: str,
        options: monitor_models.MonitorOptions | None = None,
        monitor_id: str | None = None,
    ) -> str:
        """Watch JSON-RPC replies by method, ``params.path`` and echoed id."""
        rule = monitor_models.MatchRule(http_method="POST", rpc_method=rpc_method, rpc_param_path=param_path)
        return self.register(rule, options, monitor_id)

    def register_broadcast(
        self,
        rpc_method: str,
        options: monitor_models.MonitorOptions | None = None,
        monitor_id: str | None = None,
    ) -> str:
        """Watch a JSON-RPC broadcast reply by method and echoed id only."""
        options = options or monitor_models.MonitorOptions(one_time=True, verbose=True)
        rule = monitor_models.MatchRule(http_method="POST", rpc_method=rpc_method)
        return self.register(rule, options, monitor_id)

    # ==========================================================================
    # State Transitions
    # ==========================================================================

    def _settle(
        self,
        mon: monitor_models.Monitor,
        state: monitor_models.MonitorState,
        outcome: monitor_models.MonitorOutcome,
    ) -> bool:
        """Move a pending monitor to a terminal state; no-op otherwise."""
        if not mon.pending:
            return False
        mon.state = state
        if mon.timer is not None:
            mon.timer.cancel()
            mon.timer = None
        if not mon.future.done():
            mon.future.set_result(outcome)
        return True

    def _on_timeout(self, monitor_id: str) -> None:
        mon = self._monitors.get(monitor_id)
        if mon is None:
            return
        mon.timer = None
        message = f"Monitor timed out ({mon.options.timeout_ms}ms)"
        if self._settle(mon, "TimedOut", monitor_models.TimedOut(message)):
            if mon.options.silent_timeout:
                log.debug(message, {"id": monitor_id})
            else:
                log.warn(message, {"id": monitor_id})

    def _release(self, monitor_id: str) -> None:
        mon = self._monitors.pop(monitor_id, None)
        if mon is not None:
            self._settle(mon, "Cancelled", monitor_models.Cancelled("Monitor released"))

    # ==========================================================================
    # Waiting
    # ==========================================================================

    async def wait_for_event(
        self, monitor_id: str, timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS
    ) -> monitor_models.MonitorOutcome:
        """Suspend until the monitor settles or *timeout_ms* elapses.

        The monitor is removed from the registry on every exit path.

        Raises:
            MonitorNotFoundError: If *monitor_id* is not registered.
        """
        mon = self._monitors.get(monitor_id)
        if mon is None:
            raise MonitorNotFoundError(monitor_id)

        mon.armed = True
        if mon.rule.is_rpc:
            log.debug(f"Waiting for RPC reply: {mon.rule.describe()}", {"id": monitor_id})
        try:
            return await asyncio.wait_for(asyncio.shield(mon.future), timeout_ms / 1000)
        except TimeoutError:
            self._settle(mon, "TimedOut", monitor_models.TimedOut(f"Waiting for response timed out ({timeout_ms}ms)"))
            # A match that committed first still wins.
            return mon.future.result()
        finally:
            self._release(monitor_id)

    async def wait(
        self, monitor_id: str, timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS
    ) -> monitor_models.ApiResponseResult:
        """Wait on a monitor and flatten the outcome into an ``ApiResponseResult``.

        Never raises for a missing monitor, a timeout or a cancellation;
        those come back as ``success=False`` results.
        """
        mon = self._monitors.get(monitor_id)
        started = mon.created_at if mon is not None else time.monotonic()
        try:
            outcome = await self.wait_for_event(monitor_id, timeout_ms)
        except MonitorNotFoundError as error:
            log.warn(errors.get_error_message(error))
            return monitor_models.ApiResponseResult(
                kind="failed", success=False, error=errors.get_error_message(error)
            )

        elapsed = int((time.monotonic() - started) * 1000)
        result = monitor_models.ApiResponseResult.from_outcome(outcome, elapsed)
        log.debug(
            f"Wait on {monitor_id} finished",
            {"kind": result.kind, "status": result.status, "responseTime": result.response_time},
        )
        return result

    # ==========================================================================
    # Cancellation
    # ==========================================================================

    def cancel(self, monitor_id: str) -> bool:
        """Cancel and remove a monitor.  Unknown ids are a no-op.

        Returns:
            True if a registered monitor was removed.
        """
        mon = self._monitors.pop(monitor_id, None)
        if mon is None:
            return False
        self._settle(mon, "Cancelled", monitor_models.Cancelled())
        log.debug("Monitor cancelled", {"id": monitor_id})
        return True

    def cancel_all(self) -> int:
        """Cancel every registered monitor and return how many there were."""
        ids = list(self._monitors)
        for monitor_id in ids:
            self.cancel(monitor_id)
        return len(ids)

    # ==========================================================================
    # Introspection
    # ==========================================================================

    def active_ids(self) -> list[str]:
        return list(self._monitors)

    def active_count(self) -> int:
        return len(self._monitors)

    def has_active_monitors(self) -> bool:
        return bool(self._monitors)

    def get_state(self, monitor_id: str) -> monitor_models.MonitorState | None:
        """State of a still-registered monitor, or ``None``."""
        mon = self._monitors.get(monitor_id)
        return mon.state if mon is not None else None

    def get_all_traffic(self) -> list[traffic.CapturedEvent]:
        return self._traffic.all_events()

    def get_monitor_traffic(self, monitor_id: str) -> list[traffic.CapturedEvent]:
        """Events matched by a monitor; kept after the monitor is released."""
        return self._traffic.monitor_events(monitor_id)

    def clear_traffic(self, monitor_id: str | None = None) -> None:
        self._traffic.clear(monitor_id)


def _preview(body: object) -> str | None:
    if body is None:
        return None
    text = body if isinstance(body, str) else json_parsing.stringify(body)
    return text[:_VERBOSE_BODY_CHARS]
