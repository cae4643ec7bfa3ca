"""Tests for the traffic, monitor and bridge result models."""

from __future__ import annotations

import dataclasses
import json

import pydantic
import pytest

from bridge_e2e.models import bridge, monitor, traffic
from bridge_e2e.utils import serialization

from conftest import rpc_call, rpc_reply, rpc_response


class TestRpcEnvelope:
    def test_request_with_jsonrpc_marker(self) -> None:
        envelope = traffic.RpcEnvelope.from_request_body(rpc_call(3, "abci_query", "Simulate"))
        assert envelope is not None
        assert envelope.id == 3
        assert envelope.method == "abci_query"
        assert envelope.param_path == "Simulate"

    def test_request_with_method_and_params_only(self) -> None:
        envelope = traffic.RpcEnvelope.from_request_body({"method": "status", "params": {}})
        assert envelope is not None
        assert envelope.method == "status"
        assert envelope.param_path is None

    def test_non_rpc_request(self) -> None:
        assert traffic.RpcEnvelope.from_request_body({"amount_in": "1"}) is None
        assert traffic.RpcEnvelope.from_request_body({"method": "x", "params": [1]}) is None
        assert traffic.RpcEnvelope.from_request_body("not json") is None

    def test_response_needs_id(self) -> None:
        envelope = traffic.RpcEnvelope.from_response_body(rpc_reply(5, {"code": 0}))
        assert envelope is not None
        assert envelope.id == 5
        assert envelope.result == {"code": 0}
        assert traffic.RpcEnvelope.from_response_body({"result": {}}) is None


class TestCapturedEvent:
    def test_request_uppercases_method(self) -> None:
        event = traffic.CapturedEvent.request("https://x/route", "post", {"a": 1})
        assert event.http_method == "POST"
        assert event.kind == "request"
        assert event.rpc_envelope is None

    def test_response_carries_originating_call(self) -> None:
        event = rpc_response(9, "broadcast_tx_sync", result={"code": 0})
        assert event.kind == "response"
        assert event.originating_rpc is not None
        assert event.originating_rpc.method == "broadcast_tx_sync"
        assert event.rpc_envelope is not None and event.rpc_envelope.id == 9

    def test_request_originating_rpc_is_itself(self) -> None:
        event = traffic.CapturedEvent.request("https://rpc/", "POST", rpc_call(1, "abci_query"))
        assert event.originating_rpc is event.rpc_envelope

    def test_immutable(self) -> None:
        event = traffic.CapturedEvent.request("https://x", "GET")
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.url = "https://y"  # type: ignore[misc]


class TestMatchRule:
    def test_describe_url_rule(self) -> None:
        rule = monitor.MatchRule(path="route", http_method="POST", partial_match=True)
        assert rule.describe() == "POST route (partial)"
        assert rule.is_rpc is False

    def test_describe_rpc_rule(self) -> None:
        rule = monitor.MatchRule(http_method="POST", rpc_method="abci_query", rpc_param_path="Simulate")
        assert rule.describe() == "POST rpc=abci_query path=Simulate (exact)"
        assert rule.is_rpc is True


class TestMonitorOptions:
    def test_defaults(self) -> None:
        options = monitor.MonitorOptions()
        assert options.one_time is False
        assert options.partial_match is False
        assert options.timeout_ms == 30000
        assert options.verbose is False
        assert options.silent_timeout is False


class TestApiResponseResult:
    def test_from_captured(self) -> None:
        event = rpc_response(4, "broadcast_tx_sync", result={"code": 0, "hash": "AB"})
        result = monitor.ApiResponseResult.from_outcome(monitor.Captured(event), 120)
        assert result.kind == "captured"
        assert result.success is True
        assert result.status == 200
        assert result.method == "POST"
        assert result.request_id == 4
        assert result.response_time == 120
        assert result.data["result"]["hash"] == "AB"

    def test_from_timed_out(self) -> None:
        result = monitor.ApiResponseResult.from_outcome(monitor.TimedOut("Monitor timed out (50ms)"), 50)
        assert result.success is False
        assert result.timed_out is True
        assert result.error == "Monitor timed out (50ms)"

    def test_from_cancelled(self) -> None:
        result = monitor.ApiResponseResult.from_outcome(monitor.Cancelled(), 1)
        assert result.kind == "cancelled"
        assert result.timed_out is False
        assert result.error == "Monitor cancelled"

    def test_from_failed(self) -> None:
        result = monitor.ApiResponseResult.from_outcome(monitor.Failed("boom"), 1)
        assert result.kind == "failed"
        assert result.error == "boom"


class TestBridgeOperationResult:
    """Tests for progress tracking and finalization."""

    def test_defaults(self) -> None:
        result = bridge.BridgeOperationResult()
        assert result.success is None
        assert result.test_progress == "Untested"
        assert result.route_pass is None
        assert result.finalized is False

    def test_progress_never_regresses(self) -> None:
        result = bridge.BridgeOperationResult()
        assert result.advance_progress("SignTested") == "SignTested"
        assert result.advance_progress("RouteTested") == "SignTested"
        assert result.advance_progress("Untested") == "SignTested"

    def test_progress_advances_in_order(self) -> None:
        result = bridge.BridgeOperationResult()
        result.advance_progress("RouteTested")
        assert result.test_progress == "RouteTested"
        result.advance_progress("SignTested")
        assert result.test_progress == "SignTested"

    def test_finalize_stamps_duration(self) -> None:
        result = bridge.BridgeOperationResult()
        result.timing.start_time = 1000
        result.finalize(end_time=3500)
        assert result.timing.end_time == 3500
        assert result.timing.duration == 2500

    def test_finalize_derives_success_true(self) -> None:
        assert bridge.BridgeOperationResult().finalize().success is True

    def test_finalize_derives_failure_from_error(self) -> None:
        result = bridge.BridgeOperationResult(error="something failed")
        assert result.finalize().success is False

    def test_finalize_derives_failure_from_route(self) -> None:
        result = bridge.BridgeOperationResult(route_pass=False)
        assert result.finalize().success is False

    def test_explicit_success_is_kept(self) -> None:
        result = bridge.BridgeOperationResult(error="gas fee unreadable")
        result.success = True
        assert result.finalize().success is True

    def test_finalize_overrides(self) -> None:
        result = bridge.BridgeOperationResult()
        result.advance_progress("SignTested")
        result.finalize(success=False, test_progress="RouteTested", route_pass=True)
        assert result.success is False
        assert result.test_progress == "SignTested"
        assert result.route_pass is True

    def test_finalize_only_once(self) -> None:
        result = bridge.BridgeOperationResult()
        result.finalize()
        with pytest.raises(RuntimeError):
            result.finalize()

    def test_json_round_trip(self) -> None:
        result = bridge.BridgeOperationResult(error="no routes found", route_pass=False)
        result.advance_progress("RouteTested")
        result.api_responses["route"] = bridge.ResponseRecord(
            endpoint="/v2/fungible/route", status=404, data={"code": 5, "message": "no routes found"}
        )
        result.preview["outputAmount"] = "12.5"
        result.screenshots.append("screenshots/bridge-operation-start-task-0.png")
        result.finalize()

        text = json.dumps(serialization.to_camel_dict(result))
        restored = bridge.BridgeOperationResult.model_validate(json.loads(text))
        assert restored.model_dump() == result.model_dump()


class TestResponseRecord:
    def test_frozen(self) -> None:
        record = bridge.ResponseRecord(endpoint="/v2/fungible/route")
        with pytest.raises(pydantic.ValidationError):
            record.status = 500  # type: ignore[misc]

    def test_defaults(self) -> None:
        record = bridge.ResponseRecord(endpoint="broadcast_tx_sync")
        assert record.method == "POST"
        assert record.status == 0
        assert record.timestamp > 0
