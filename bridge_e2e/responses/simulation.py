"""Decoder for the transaction simulation RPC reply.

The simulation result may arrive as an object, as a JSON string, as
base64-wrapped JSON, or nested under ``response.result``.  A
non-zero ``code``, or any mention of "error" or "fail" in the
result, marks the simulation as failed.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import re
from typing import Any

from bridge_e2e.models import monitor
from bridge_e2e.responses import common
from bridge_e2e.utils import errors, json_parsing

SIMULATE_ENDPOINT = "/cosmos.tx.v1beta1.Service/Simulate"
SIMULATE_RPC_METHOD = "abci_query"
SIMULATE_PARAM_PATH = "Simulate"

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/=]+$")
_ERROR_FRAGMENT_RE = re.compile(r"error[^}]*}", re.IGNORECASE)


@dataclasses.dataclass(frozen=True)
class SimulationOutcome:
    ok: bool
    error: str | None = None


def _fail(message: str) -> SimulationOutcome:
    return SimulationOutcome(ok=False, error=f"Transaction simulation failed: {message}")


def decode_base64_text(value: str) -> str | None:
    """Decode base64 text, or return ``None`` if it is not valid base64.

    Missing ``=`` padding is tolerated.
    """
    try:
        raw = base64.b64decode(value + "=" * (-len(value) % 4), validate=True)
    except (binascii.Error, ValueError):
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def _decode_result_string(value: str) -> Any:
    if _BASE64_RE.match(value):
        decoded = decode_base64_text(value)
        if decoded is None:
            return value
        parsed = json_parsing.load_json(decoded)
        return parsed if parsed is not None else decoded
    parsed = json_parsing.load_json(value)
    return parsed if parsed is not None else value


def extract_result(data: Any) -> Any:
    """Locate and decode the simulation result within a reply body."""
    if not isinstance(data, dict):
        return None
    raw = data.get("result")
    if raw:
        return _decode_result_string(raw) if isinstance(raw, str) else raw
    response = data.get("response")
    if isinstance(response, dict) and response.get("result"):
        return response["result"]
    return None


def _error_message(result: Any, text: str) -> str:
    if isinstance(result, dict):
        if result.get("raw_log"):
            return str(result["raw_log"])
        if result.get("log"):
            return str(result["log"])
    match = _ERROR_FRAGMENT_RE.search(text)
    return match.group(0) if match else "Unknown error"


def _inspect(data: Any) -> SimulationOutcome:
    if isinstance(data, dict) and data.get("error"):
        error = data["error"]
        return _fail(json_parsing.stringify(error) if isinstance(error, (dict, list)) else str(error))

    result = extract_result(data)
    if not result:
        return SimulationOutcome(ok=True)

    if isinstance(result, dict):
        code = result.get("code")
        if code is not None and code != 0:
            return _fail(str(result.get("raw_log") or result.get("message") or f"Code: {code}"))

    text = json_parsing.stringify(result).lower()
    if "error" in text or "fail" in text:
        return _fail(_error_message(result, text))
    return SimulationOutcome(ok=True)


def decode_simulation(capture: monitor.ApiResponseResult) -> SimulationOutcome:
    """Decide whether the captured simulation reply reports a failure.

    A reply without a body is not a failure.
    """
    if not common.has_body(capture.data):
        return SimulationOutcome(ok=True)
    try:
        return _inspect(capture.data)
    except Exception as error:
        return SimulationOutcome(
            ok=False,
            error=f"Error processing simulation response: {errors.get_error_message(error)}",
        )
