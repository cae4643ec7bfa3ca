"""
Response interpretation.

``interpret`` turns a captured response into a domain outcome by
dispatching to the per-endpoint decoder.  ``ResponseHandler`` records
each capture in the result's ``api_responses`` and applies the
outcome to the result record.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal

from bridge_e2e.models import bridge, monitor
from bridge_e2e.responses import broadcast, messages, route, simulation
from bridge_e2e.utils import logger

log = logger.create_logger("ResponseHandler")

ResponseKind = Literal["route", "msgs", "simulate", "broadcast"]

DomainOutcome = (
    route.RouteOutcome
    | messages.MessagesOutcome
    | simulation.SimulationOutcome
    | broadcast.BroadcastOutcome
)

_DECODERS: dict[str, Callable[[monitor.ApiResponseResult], DomainOutcome]] = {
    "route": route.decode_route,
    "msgs": messages.decode_messages,
    "simulate": simulation.decode_simulation,
    "broadcast": broadcast.decode_broadcast,
}

ENDPOINTS: dict[str, str] = {
    "route": route.ROUTE_ENDPOINT,
    "msgs": messages.MESSAGES_ENDPOINT,
    "simulate": simulation.SIMULATE_ENDPOINT,
    "broadcast": broadcast.BROADCAST_RPC_METHOD,
}


def interpret(kind: ResponseKind, capture: monitor.ApiResponseResult) -> DomainOutcome:
    """Decode *capture* with the decoder registered for *kind*.

    Raises:
        ValueError: If *kind* has no decoder.
    """
    decoder = _DECODERS.get(kind)
    if decoder is None:
        raise ValueError(f"Unknown response kind {kind!r}")
    return decoder(capture)


class ResponseHandler:
    """Applies interpreted responses to a ``BridgeOperationResult``."""

    def record(
        self,
        result: bridge.BridgeOperationResult,
        name: str,
        capture: monitor.ApiResponseResult,
        endpoint: str = "",
        method: str | None = None,
    ) -> bridge.ResponseRecord:
        """Store an immutable snapshot of *capture* under *name*."""
        record = bridge.ResponseRecord(
            endpoint=endpoint,
            method=method or capture.method or "POST",
            status=capture.status or 0,
            success=capture.success,
            data=capture.data,
            response_time=capture.response_time,
        )
        result.api_responses[name] = record
        log.info(
            f"Recorded API response: {name}",
            {"endpoint": endpoint, "status": record.status, "success": record.success},
        )
        return record

    def handle_route(
        self, result: bridge.BridgeOperationResult, capture: monitor.ApiResponseResult
    ) -> route.RouteOutcome:
        """Record the route reply and settle route validity on *result*."""
        self.record(result, "route", capture, ENDPOINTS["route"])
        outcome = route.decode_route(capture)
        result.advance_progress("RouteTested")
        result.route_pass = outcome.route_pass
        if not outcome.route_pass:
            result.error = outcome.error
            log.warn("Route API reported a failure", {"error": outcome.error, "status": capture.status})
        return outcome

    def handle_messages(
        self, result: bridge.BridgeOperationResult, capture: monitor.ApiResponseResult
    ) -> messages.MessagesOutcome:
        """Record the messages reply and merge its preview fields into *result*."""
        self.record(result, "msgs", capture, ENDPOINTS["msgs"])
        outcome = messages.decode_messages(capture)
        if not outcome.ok:
            result.error = outcome.error
            log.warn("Messages API reported a failure", {"error": outcome.error, "status": capture.status})
            return outcome
        result.preview.update(outcome.preview)
        log.debug("Extracted messages preview", {"fields": list(outcome.preview)})
        return outcome

    def handle_simulation(
        self, result: bridge.BridgeOperationResult, capture: monitor.ApiResponseResult
    ) -> simulation.SimulationOutcome:
        """Record the simulation reply and set the error if it failed."""
        self.record(result, "simulate", capture, ENDPOINTS["simulate"], method="POST")
        outcome = simulation.decode_simulation(capture)
        if not outcome.ok:
            result.error = outcome.error
            log.warn("Transaction simulation failed", {"error": outcome.error})
        return outcome

    def handle_broadcast(
        self, result: bridge.BridgeOperationResult, capture: monitor.ApiResponseResult
    ) -> broadcast.BroadcastOutcome:
        """Record the broadcast reply and apply hash or failure to *result*."""
        self.record(result, "broadcast", capture, ENDPOINTS["broadcast"], method="POST")
        outcome = broadcast.decode_broadcast(capture)
        if outcome.ok:
            if outcome.tx_hash:
                result.transaction_hash = outcome.tx_hash
            result.success = True
            log.success("Transaction broadcast succeeded", {"hash": outcome.tx_hash})
        else:
            result.error = outcome.error
            result.success = False
            log.warn("Transaction broadcast failed", {"error": outcome.error})
        return outcome
