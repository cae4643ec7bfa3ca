"""Decoder for the transaction broadcast RPC reply."""

from __future__ import annotations

import dataclasses

from bridge_e2e.models import monitor
from bridge_e2e.responses import common

BROADCAST_RPC_METHOD = "broadcast_tx_sync"


@dataclasses.dataclass(frozen=True)
class BroadcastOutcome:
    ok: bool
    tx_hash: str | None = None
    error: str | None = None


def decode_broadcast(capture: monitor.ApiResponseResult) -> BroadcastOutcome:
    """Extract the transaction hash, or the failure reason.

    Success requires ``result.code == 0``; the hash is optional even
    then.
    """
    if not capture.success or not common.has_body(capture.data):
        return BroadcastOutcome(ok=False, error=capture.error or "Failed to get response")

    result = capture.data.get("result") if isinstance(capture.data, dict) else None
    if not result:
        return BroadcastOutcome(ok=False, error="No result field in response")

    code = result.get("code") if isinstance(result, dict) else None
    if code == 0 and not isinstance(code, bool):
        tx_hash = result.get("hash")
        return BroadcastOutcome(ok=True, tx_hash=str(tx_hash) if tx_hash else None)

    log_text = result.get("log") if isinstance(result, dict) else None
    return BroadcastOutcome(ok=False, error=f"Transaction failed (code={code}): {log_text or 'Unknown error'}")
