"""Tests for page traffic capture in bridge_e2e.monitoring.recorder."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from bridge_e2e.models import traffic
from bridge_e2e.monitoring import recorder

from conftest import ROUTE_URL, RPC_URL, rpc_call, rpc_reply


class _FakeRequest:
    def __init__(self, url: str, method: str, post_data: str | None = None) -> None:
        self.url = url
        self.method = method
        self.post_data = post_data


class _FakeResponse:
    def __init__(self, request: _FakeRequest, status: int, body: bytes | Exception) -> None:
        self.request = request
        self.url = request.url
        self.status = status
        self._body = body

    async def body(self) -> bytes:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


def _make_recorder(wants_body: Any = None) -> tuple[recorder.TrafficRecorder, list[recorder.QueueItem], MagicMock]:
    page = MagicMock()
    items: list[recorder.QueueItem] = []
    return recorder.TrafficRecorder(page, items.append, wants_body=wants_body), items, page


async def _resolve(item: recorder.QueueItem) -> traffic.CapturedEvent:
    return await item if isinstance(item, asyncio.Task) else item


class TestTrafficLog:
    def test_global_log_is_bounded(self) -> None:
        log = recorder.TrafficLog(max_events=2)
        for n in range(3):
            log.record(traffic.CapturedEvent.request(f"https://x/{n}", "GET"))
        assert [e.url for e in log.all_events()] == ["https://x/1", "https://x/2"]

    def test_monitor_log_is_bounded(self) -> None:
        log = recorder.TrafficLog(max_monitor_events=1)
        log.open("m")
        log.record_for("m", traffic.CapturedEvent.request("https://x/a", "GET"))
        log.record_for("m", traffic.CapturedEvent.request("https://x/b", "GET"))
        assert [e.url for e in log.monitor_events("m")] == ["https://x/b"]

    def test_unknown_monitor_is_empty(self) -> None:
        assert recorder.TrafficLog().monitor_events("nope") == []


class TestAttach:
    def test_attach_and_detach_are_idempotent(self) -> None:
        rec, _, page = _make_recorder()
        rec.attach()
        rec.attach()
        assert rec.attached is True
        assert page.on.call_count == 2

        rec.detach()
        rec.detach()
        assert rec.attached is False
        assert page.remove_listener.call_count == 2


class TestCapture:
    """Requests are queued as events, responses as tasks resolving to events."""

    def test_post_request_parses_rpc(self) -> None:
        rec, items, _ = _make_recorder()
        rec._on_request(_FakeRequest(RPC_URL, "post", json.dumps(rpc_call(4, "abci_query", "Simulate"))))

        event = items[0]
        assert isinstance(event, traffic.CapturedEvent)
        assert event.kind == "request"
        assert event.http_method == "POST"
        assert event.rpc_envelope is not None
        assert event.rpc_envelope.param_path == "Simulate"

    def test_get_request_has_no_body(self) -> None:
        rec, items, _ = _make_recorder()
        rec._on_request(_FakeRequest(ROUTE_URL, "GET", "ignored"))
        assert isinstance(items[0], traffic.CapturedEvent)
        assert items[0].body is None

    @pytest.mark.asyncio
    async def test_post_response_correlates_request(self) -> None:
        rec, items, _ = _make_recorder()
        request = _FakeRequest(RPC_URL, "POST", json.dumps(rpc_call(4, "broadcast_tx_sync")))
        rec._on_response(_FakeResponse(request, 200, json.dumps(rpc_reply(4, {"code": 0})).encode()))

        event = await _resolve(items[0])
        assert event.kind == "response"
        assert event.status_code == 200
        assert event.originating_rpc is not None
        assert event.originating_rpc.method == "broadcast_tx_sync"
        assert event.rpc_envelope is not None and event.rpc_envelope.id == 4

    @pytest.mark.asyncio
    async def test_get_body_read_only_when_wanted(self) -> None:
        rec, items, _ = _make_recorder(wants_body=lambda url, method: "route" in url)
        rec._on_response(_FakeResponse(_FakeRequest(ROUTE_URL, "GET"), 200, b'{"ok": true}'))
        rec._on_response(_FakeResponse(_FakeRequest("https://x/other", "GET"), 200, b'{"ok": true}'))

        wanted = await _resolve(items[0])
        skipped = await _resolve(items[1])
        assert wanted.body == {"ok": True}
        assert skipped.body is None

    @pytest.mark.asyncio
    async def test_unreadable_body_still_produces_event(self) -> None:
        rec, items, _ = _make_recorder()
        request = _FakeRequest(ROUTE_URL, "POST", '{"amount_in": "1"}')
        rec._on_response(_FakeResponse(request, 302, RuntimeError("no body for redirect")))

        event = await _resolve(items[0])
        assert event.status_code == 302
        assert event.body is None
