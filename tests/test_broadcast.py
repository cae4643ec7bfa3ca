"""Tests for bridge_e2e.responses.broadcast."""

from __future__ import annotations

from bridge_e2e.models import monitor
from bridge_e2e.responses import broadcast

from conftest import RPC_URL, captured, rpc_reply


def _reply(result: object) -> monitor.ApiResponseResult:
    return captured(rpc_reply(11, result), status=200, url=RPC_URL)


class TestDecodeBroadcast:
    def test_success_with_hash(self) -> None:
        outcome = broadcast.decode_broadcast(_reply({"code": 0, "hash": "A1B2"}))
        assert outcome.ok is True
        assert outcome.tx_hash == "A1B2"

    def test_success_without_hash(self) -> None:
        outcome = broadcast.decode_broadcast(_reply({"code": 0}))
        assert outcome.ok is True
        assert outcome.tx_hash is None

    def test_failure_code_with_log(self) -> None:
        outcome = broadcast.decode_broadcast(_reply({"code": 5, "log": "insufficient funds"}))
        assert outcome.ok is False
        assert outcome.error == "Transaction failed (code=5): insufficient funds"

    def test_failure_code_without_log(self) -> None:
        outcome = broadcast.decode_broadcast(_reply({"code": 13}))
        assert outcome.error == "Transaction failed (code=13): Unknown error"

    def test_missing_result(self) -> None:
        outcome = broadcast.decode_broadcast(_reply({}))
        assert outcome.error == "No result field in response"

    def test_unsuccessful_capture(self) -> None:
        capture = monitor.ApiResponseResult(kind="timed_out", success=False, error="Monitor timed out (15000ms)")
        outcome = broadcast.decode_broadcast(capture)
        assert outcome.ok is False
        assert outcome.error == "Monitor timed out (15000ms)"
