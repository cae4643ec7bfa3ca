"""Shared fixtures for the test suite."""

from __future__ import annotations

from typing import Any

import pytest

from bridge_e2e.models import monitor, traffic

# ── Event Factories ─────────────────────────────────────────────

RPC_URL = "https://rpc.example.com/"
ROUTE_URL = "https://router-api.example.com/v2/fungible/route"
MSGS_URL = "https://router-api.example.com/v2/fungible/msgs"


def rpc_call(request_id: int, method: str, path: str | None = None) -> dict[str, Any]:
    params: dict[str, Any] = {"data": "0a0b"}
    if path is not None:
        params["path"] = path
    return {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}


def rpc_reply(request_id: int, result: Any = None, error: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id}
    if error is not None:
        body["error"] = error
    else:
        body["result"] = result
    return body


def rpc_response(
    request_id: int,
    method: str,
    path: str | None = None,
    result: Any = None,
    reply_id: int | None = None,
) -> traffic.CapturedEvent:
    """An RPC response event whose originating call is *method*."""
    return traffic.CapturedEvent.response(
        RPC_URL,
        "POST",
        200,
        rpc_reply(request_id if reply_id is None else reply_id, result),
        rpc_call(request_id, method, path),
    )


def captured(data: Any, status: int = 201, url: str = ROUTE_URL) -> monitor.ApiResponseResult:
    """A successful capture carrying *data*."""
    return monitor.ApiResponseResult(kind="captured", success=True, data=data, status=status, url=url, method="POST")


@pytest.fixture()
def route_response() -> traffic.CapturedEvent:
    """A clean 201 reply from the route endpoint."""
    return traffic.CapturedEvent.response(ROUTE_URL, "POST", 201, {"amount_out": "12", "required_op_hook": False})


@pytest.fixture()
def route_request() -> traffic.CapturedEvent:
    return traffic.CapturedEvent.request(ROUTE_URL, "POST", {"amount_in": "1000"})


@pytest.fixture()
def simulate_response() -> traffic.CapturedEvent:
    """A successful simulation reply to an ``abci_query`` call."""
    return rpc_response(7, "abci_query", "/cosmos.tx.v1beta1.Service/Simulate", {"response": {"code": 0}})


@pytest.fixture()
def messages_body() -> dict[str, Any]:
    """A representative messages endpoint reply."""
    return {
        "fee": {"amount": "1500", "denom": "uinit"},
        "estimatedDuration": 45,
        "txs": [
            {
                "cosmos_tx": {
                    "chain_id": "interwoven-1",
                    "path": ["interwoven-1", "bfb-1"],
                    "signer_address": "init1signer",
                    "msgs": [{"type": "transfer"}, {"type": "swap"}],
                }
            }
        ],
    }
