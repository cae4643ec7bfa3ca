"""Decoder for the transaction messages endpoint.

Besides the pass/fail decision, a successful reply yields preview
fields shown in the result record: fee, estimated duration, and
chain id, hop path, signer and message count from the first
transaction.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from bridge_e2e.models import monitor
from bridge_e2e.responses import common
from bridge_e2e.utils import json_parsing

MESSAGES_ENDPOINT = "/v2/fungible/msgs"


@dataclasses.dataclass(frozen=True)
class MessagesOutcome:
    ok: bool
    error: str | None = None
    preview: dict[str, Any] = dataclasses.field(default_factory=dict)


def _first_cosmos_tx(data: dict[str, Any]) -> dict[str, Any] | None:
    txs = data.get("txs")
    if not isinstance(txs, list) or not txs or not isinstance(txs[0], dict):
        return None
    cosmos_tx = txs[0].get("cosmos_tx")
    return cosmos_tx if isinstance(cosmos_tx, dict) else None


def extract_preview(data: Any) -> dict[str, Any]:
    """Pull preview fields out of a messages reply; missing ones are skipped."""
    if not isinstance(data, dict):
        return {}

    preview: dict[str, Any] = {}
    fee = data.get("fee")
    if fee:
        preview["fee"] = json_parsing.stringify(fee) if isinstance(fee, (dict, list)) else str(fee)
    duration = data.get("estimatedDuration")
    if duration:
        preview["estimatedDuration"] = str(duration)

    cosmos_tx = _first_cosmos_tx(data)
    if cosmos_tx is None:
        return preview
    if cosmos_tx.get("chain_id"):
        preview["chainId"] = cosmos_tx["chain_id"]
    path = cosmos_tx.get("path")
    if isinstance(path, list) and path:
        preview["path"] = " -> ".join(str(hop) for hop in path)
    if cosmos_tx.get("signer_address"):
        preview["signerAddress"] = cosmos_tx["signer_address"]
    msgs = cosmos_tx.get("msgs")
    if isinstance(msgs, list) and msgs:
        preview["msgsCount"] = len(msgs)
    return preview


def decode_messages(capture: monitor.ApiResponseResult) -> MessagesOutcome:
    """Decide whether the messages reply is usable and extract its preview."""
    if capture.status != common.CREATED:
        return MessagesOutcome(
            ok=False,
            error=common.http_error_message(capture.data, capture.status, "Messages API"),
        )

    embedded = common.embedded_error(capture.data)
    if embedded is not None:
        return MessagesOutcome(ok=False, error=embedded)

    if capture.success and common.has_body(capture.data):
        return MessagesOutcome(ok=True, preview=extract_preview(capture.data))
    return MessagesOutcome(ok=True)
