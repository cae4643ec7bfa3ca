"""Decoder for the route quote endpoint."""

from __future__ import annotations

import dataclasses

from bridge_e2e.models import monitor
from bridge_e2e.responses import common

ROUTE_ENDPOINT = "/v2/fungible/route"
NO_ROUTES_FOUND = "no routes found"


@dataclasses.dataclass(frozen=True)
class RouteOutcome:
    """Whether the quoted route is usable, and why not if it isn't."""

    route_pass: bool
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.route_pass


def has_no_routes_found_error(capture: monitor.ApiResponseResult) -> bool:
    """Detect the server's "no routes found" reply.

    Requires a 404 status or an unsuccessful capture, with either an
    object body whose ``message`` is exactly "no routes found" or a
    string body containing it.
    """
    if capture.status != 404 and capture.success:
        return False
    data = capture.data
    if isinstance(data, dict):
        return data.get("message") == NO_ROUTES_FOUND
    if isinstance(data, str):
        return NO_ROUTES_FOUND in data
    return False


def decode_route(capture: monitor.ApiResponseResult) -> RouteOutcome:
    """Decide route validity from a captured route response."""
    if capture.status != common.CREATED:
        if has_no_routes_found_error(capture):
            return RouteOutcome(route_pass=False, error=NO_ROUTES_FOUND)
        return RouteOutcome(
            route_pass=False,
            error=common.http_error_message(capture.data, capture.status, "Route API"),
        )

    embedded = common.embedded_error(capture.data)
    if embedded is not None:
        return RouteOutcome(route_pass=False, error=embedded)
    return RouteOutcome(route_pass=True)
