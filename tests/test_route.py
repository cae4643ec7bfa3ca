"""Tests for route quote decoding."""

from __future__ import annotations

from bridge_e2e.models import monitor
from bridge_e2e.responses import route

from conftest import captured


class TestNoRoutesFound:
    def test_404_object_body(self) -> None:
        capture = captured({"code": 5, "message": "no routes found"}, status=404)
        assert route.has_no_routes_found_error(capture) is True

    def test_message_must_match_exactly(self) -> None:
        capture = captured({"message": "no routes found for USDC"}, status=404)
        assert route.has_no_routes_found_error(capture) is False

    def test_string_body_containment(self) -> None:
        capture = monitor.ApiResponseResult(kind="failed", success=False, data="error: no routes found (USDC)")
        assert route.has_no_routes_found_error(capture) is True

    def test_successful_non_404_is_ignored(self) -> None:
        capture = captured({"message": "no routes found"}, status=500)
        assert route.has_no_routes_found_error(capture) is False


class TestDecodeRoute:
    def test_created_is_a_pass(self) -> None:
        outcome = route.decode_route(captured({"amount_out": "12", "does_swap": True}))
        assert outcome.route_pass is True
        assert outcome.ok is True
        assert outcome.error is None

    def test_no_routes_found(self) -> None:
        outcome = route.decode_route(captured({"code": 5, "message": "no routes found"}, status=404))
        assert outcome.route_pass is False
        assert outcome.error == "no routes found"

    def test_non_created_object_body_is_serialised(self) -> None:
        outcome = route.decode_route(captured({"code": 3, "message": "invalid amount"}, status=400))
        assert outcome.error == '{"code":3,"message":"invalid amount"}'

    def test_non_created_json_string_is_compacted(self) -> None:
        outcome = route.decode_route(captured('{"code": 3, "message": "bad"}', status=400))
        assert outcome.error == '{"code":3,"message":"bad"}'

    def test_non_created_plain_text(self) -> None:
        outcome = route.decode_route(captured("Bad Gateway", status=502))
        assert outcome.error == "Bad Gateway"

    def test_non_created_without_body(self) -> None:
        outcome = route.decode_route(captured(None, status=500))
        assert outcome.error == "Route API request failed, status code: 500"

    def test_timed_out_capture(self) -> None:
        capture = monitor.ApiResponseResult(kind="timed_out", success=False, error="Monitor timed out (5000ms)")
        outcome = route.decode_route(capture)
        assert outcome.route_pass is False
        assert outcome.error == "Route API request failed, status code: None"

    def test_created_with_embedded_error(self) -> None:
        outcome = route.decode_route(captured({"warning": {"Error": "slippage too high"}}))
        assert outcome.route_pass is False
        assert outcome.error == '{"warning":{"Error":"slippage too high"}}'

    def test_created_with_string_body_mentioning_error_passes(self) -> None:
        outcome = route.decode_route(captured("error"))
        assert outcome.route_pass is True
