"""
Traffic recording for a browser page.

``TrafficRecorder`` subscribes to a Playwright page's request and
response events and turns each one into an immutable
``CapturedEvent``.  Events are not handed to monitors directly;
they are pushed onto a single-consumer queue that the monitor
registry drains on its own turn.

Response bodies have to be awaited, so a response is queued as a
task that resolves to its event.  Requests and response tasks share
the queue in arrival order, which keeps delivery order identical to
what the browser reported.

``TrafficLog`` keeps the bounded, queryable history: one global log
of everything and one private log per monitor.
"""

from __future__ import annotations

import asyncio
import collections
from collections.abc import Callable

from playwright import async_api

from bridge_e2e.models import traffic
from bridge_e2e.utils import errors, json_parsing, logger

log = logger.create_logger("TrafficRecorder")

# ============================================================================
# Constants
# ============================================================================

MAX_TRACKED_EVENTS = 5000
MAX_MONITOR_EVENTS = 500

QueueItem = traffic.CapturedEvent | asyncio.Task[traffic.CapturedEvent]


# ============================================================================
# Traffic Log
# ============================================================================


class TrafficLog:
    """Append-only, bounded logs of captured events."""

    def __init__(
        self,
        max_events: int = MAX_TRACKED_EVENTS,
        max_monitor_events: int = MAX_MONITOR_EVENTS,
    ) -> None:
        self._all: collections.deque[traffic.CapturedEvent] = collections.deque(maxlen=max_events)
        self._per_monitor: dict[str, collections.deque[traffic.CapturedEvent]] = {}
        self._max_monitor_events = max_monitor_events

    def record(self, event: traffic.CapturedEvent) -> None:
        """Append to the global log, dropping the oldest entry when full."""
        self._all.append(event)

    def open(self, monitor_id: str) -> None:
        """Start an empty private log for *monitor_id*."""
        self._per_monitor[monitor_id] = collections.deque(maxlen=self._max_monitor_events)

    def record_for(self, monitor_id: str, event: traffic.CapturedEvent) -> None:
        """Append to a monitor's private log."""
        self._per_monitor.setdefault(
            monitor_id, collections.deque(maxlen=self._max_monitor_events)
        ).append(event)

    def all_events(self) -> list[traffic.CapturedEvent]:
        return list(self._all)

    def monitor_events(self, monitor_id: str) -> list[traffic.CapturedEvent]:
        return list(self._per_monitor.get(monitor_id, ()))

    def clear(self, monitor_id: str | None = None) -> None:
        """Clear one monitor's log, or every log when no id is given."""
        if monitor_id is None:
            self._all.clear()
            self._per_monitor.clear()
            return
        self._per_monitor.pop(monitor_id, None)


# ============================================================================
# Traffic Recorder
# ============================================================================


class TrafficRecorder:
    """Turns page traffic into queued ``CapturedEvent`` messages.

    Args:
        page: The page to observe.
        sink: Called with each queued item, in arrival order.
        wants_body: Decides whether a non-POST response body is
            worth reading.  POST bodies are always read since RPC
            correlation needs them.
        show_verbose: Log every observed request and response.
    """

    def __init__(
        self,
        page: async_api.Page,
        sink: Callable[[QueueItem], None],
        wants_body: Callable[[str, str], bool] | None = None,
        show_verbose: bool = False,
    ) -> None:
        self._page = page
        self._sink = sink
        self._wants_body = wants_body
        self._show_verbose = show_verbose
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        """Subscribe to the page's request and response events."""
        if self._attached:
            return
        self._page.on("request", self._on_request)
        self._page.on("response", self._on_response)
        self._attached = True
        log.debug("Traffic recorder attached")

    def detach(self) -> None:
        """Unsubscribe from the page; already-queued items still drain."""
        if not self._attached:
            return
        self._page.remove_listener("request", self._on_request)
        self._page.remove_listener("response", self._on_response)
        self._attached = False
        log.debug("Traffic recorder detached")

    # ==========================================================================
    # Event Handlers
    # ==========================================================================

    def _on_request(self, request: async_api.Request) -> None:
        method = request.method.upper()
        body = json_parsing.decode_body(_read_post_data(request)) if method == "POST" else None
        event = traffic.CapturedEvent.request(request.url, method, body)
        if self._show_verbose:
            log.debug("Request", {"method": method, "url": event.url, "rpc": _rpc_method(event)})
        self._sink(event)

    def _on_response(self, response: async_api.Response) -> None:
        self._sink(asyncio.ensure_future(self._capture_response(response)))

    async def _capture_response(self, response: async_api.Response) -> traffic.CapturedEvent:
        request = response.request
        method = request.method.upper()
        url = response.url

        request_body = None
        body = None
        if method == "POST":
            request_body = json_parsing.decode_body(_read_post_data(request))
        if method == "POST" or (self._wants_body is not None and self._wants_body(url, method)):
            try:
                body = json_parsing.decode_body(await response.body())
            except Exception as error:
                # Redirects and responses of closed pages have no body.
                log.debug("Response body unavailable", {"url": url, "error": errors.get_error_message(error)})

        event = traffic.CapturedEvent.response(url, method, response.status, body, request_body)
        if self._show_verbose:
            log.debug("Response", {"status": response.status, "method": method, "url": url})
        return event


def _read_post_data(request: async_api.Request) -> str | None:
    try:
        return request.post_data
    except Exception:
        # Binary payloads cannot be decoded as text.
        return None


def _rpc_method(event: traffic.CapturedEvent) -> str | None:
    call = event.originating_rpc
    return call.method if call else None
