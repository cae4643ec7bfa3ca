"""Immutable records for observed network traffic.

A ``CapturedEvent`` is built once per request or response the
browser reports and is never mutated afterwards.  JSON-RPC payloads
are parsed into an ``RpcEnvelope`` at capture time so matching does
not re-parse bodies.
"""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
from typing import Any, Literal

EventKind = Literal["request", "response"]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclasses.dataclass(frozen=True)
class RpcEnvelope:
    """Parsed JSON-RPC envelope.

    Requests carry ``method``/``params``; responses carry
    ``result``/``error``.  Both carry the correlation ``id``.
    """

    id: Any = None
    method: str | None = None
    params: dict[str, Any] | None = None
    result: Any = None
    error: Any = None

    @property
    def param_path(self) -> str | None:
        """The ``params.path`` value of a request, if it is a string."""
        if self.params is None:
            return None
        path = self.params.get("path")
        return path if isinstance(path, str) else None

    @classmethod
    def from_request_body(cls, body: Any) -> RpcEnvelope | None:
        """Parse a decoded request body as a JSON-RPC call.

        A body counts as RPC when it declares ``"jsonrpc": "2.0"`` or
        carries a string ``method`` alongside an object ``params``.
        """
        if not isinstance(body, dict):
            return None
        method = body.get("method")
        params = body.get("params")
        if body.get("jsonrpc") != "2.0" and not (isinstance(method, str) and isinstance(params, dict)):
            return None
        return cls(
            id=body.get("id"),
            method=method if isinstance(method, str) else None,
            params=params if isinstance(params, dict) else None,
        )

    @classmethod
    def from_response_body(cls, body: Any) -> RpcEnvelope | None:
        """Parse a decoded response body as a JSON-RPC reply (needs an ``id`` key)."""
        if not isinstance(body, dict) or "id" not in body:
            return None
        return cls(id=body.get("id"), result=body.get("result"), error=body.get("error"))


@dataclasses.dataclass(frozen=True)
class CapturedEvent:
    """An observed request or response.

    For responses, ``http_method`` and ``request_rpc`` describe the
    originating request so RPC replies can be correlated by id.
    """

    kind: EventKind
    url: str
    http_method: str
    timestamp: str = dataclasses.field(default_factory=_now_iso)
    status_code: int | None = None
    body: Any = None
    rpc_envelope: RpcEnvelope | None = None
    request_rpc: RpcEnvelope | None = None

    @property
    def originating_rpc(self) -> RpcEnvelope | None:
        """The JSON-RPC call that produced this event, if any."""
        if self.kind == "request":
            return self.rpc_envelope
        return self.request_rpc

    @classmethod
    def request(cls, url: str, http_method: str, body: Any = None) -> CapturedEvent:
        """Build a request event, parsing an RPC envelope from *body*."""
        return cls(
            kind="request",
            url=url,
            http_method=http_method.upper(),
            body=body,
            rpc_envelope=RpcEnvelope.from_request_body(body),
        )

    @classmethod
    def response(
        cls,
        url: str,
        http_method: str,
        status_code: int,
        body: Any = None,
        request_body: Any = None,
    ) -> CapturedEvent:
        """Build a response event correlated with its request body."""
        return cls(
            kind="response",
            url=url,
            http_method=http_method.upper(),
            status_code=status_code,
            body=body,
            rpc_envelope=RpcEnvelope.from_response_body(body),
            request_rpc=RpcEnvelope.from_request_body(request_body),
        )
