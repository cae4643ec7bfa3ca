"""Tests for result files and the console summary."""

from __future__ import annotations

import json
import pathlib

import pytest

from bridge_e2e import config, results
from bridge_e2e.models import bridge
from bridge_e2e.utils import logger


@pytest.fixture()
def settings(tmp_path: pathlib.Path) -> config.HarnessSettings:
    return config.HarnessSettings(TASKID="9", RESULTS_DIR=str(tmp_path / "results"))


@pytest.fixture()
def params() -> bridge.BridgeOperationInput:
    return bridge.BridgeOperationInput(amount="0.5", from_chain="BFB", to_token="BFB", route_type="Optimistic bridge")


@pytest.fixture()
def finished() -> bridge.BridgeOperationResult:
    result = bridge.BridgeOperationResult(transaction_hash="ABC123")
    result.advance_progress("SignTested")
    result.route_pass = True
    result.api_responses["broadcast"] = bridge.ResponseRecord(
        endpoint="broadcast_tx_sync", status=200, success=True, data={"result": {"code": 0}}
    )
    result.preview["gasfee"] = "0.0015 INIT"
    result.finalize()
    return result


class TestResultPath:
    def test_name(self) -> None:
        path = results.result_path("out", "3", 1700000000000)
        assert path == pathlib.Path("out") / "bridge-result-3-1700000000000.json"


class TestSaveResult:
    def test_writes_camel_case_json(
        self,
        settings: config.HarnessSettings,
        params: bridge.BridgeOperationInput,
        finished: bridge.BridgeOperationResult,
    ) -> None:
        path = pathlib.Path(results.save_result(finished, params, settings))
        assert path.parent == pathlib.Path(settings.results_dir)
        assert path.name.startswith("bridge-result-9-")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["taskId"] == "9"
        assert data["input"]["fromChain"] == "BFB"
        assert data["input"]["routeType"] == "Optimistic bridge"
        assert data["testProgress"] == "SignTested"
        assert data["transactionHash"] == "ABC123"
        assert data["apiResponses"]["broadcast"]["responseTime"] == 0

    def test_load_round_trip(
        self,
        settings: config.HarnessSettings,
        params: bridge.BridgeOperationInput,
        finished: bridge.BridgeOperationResult,
    ) -> None:
        loaded = results.load_result(results.save_result(finished, params, settings))
        assert loaded.success is True
        assert loaded.transaction_hash == "ABC123"
        assert loaded.api_responses["broadcast"].data == {"result": {"code": 0}}


class TestPrintSummary:
    def test_sections(self, params: bridge.BridgeOperationInput, finished: bridge.BridgeOperationResult) -> None:
        logger.clear_log_buffer()
        results.print_summary(finished, params, "results/bridge-result-9-1.json")
        text = "\n".join(logger.get_log_buffer())
        for heading in ("Operation Status", "Transaction Hash", "Preview Information", "API Responses Summary"):
            assert heading in text
        assert "ABC123" in text
        assert "results/bridge-result-9-1.json" in text
        assert "▸ Error" not in text

    def test_failure_shows_error(self, params: bridge.BridgeOperationInput) -> None:
        logger.clear_log_buffer()
        result = bridge.BridgeOperationResult(error="no routes found", route_pass=False).finalize()
        results.print_summary(result, params)
        text = "\n".join(logger.get_log_buffer())
        assert "Operation failed" in text
        assert "no routes found" in text
        assert "Result File" not in text
