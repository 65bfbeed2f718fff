"""Tests for outbound automation events (case_created, message_sent, relay)."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from fixmypidge.core.config import settings
from fixmypidge.services import automation_outbound_service

AUTOMATION_URL = "https://automation.test/webhook/fixmypidge?token=abc"


@pytest.fixture
def automation_url(monkeypatch):
    monkeypatch.setattr(settings, "AUTOMATION_WEBHOOK_URL", AUTOMATION_URL)
    return AUTOMATION_URL


@pytest.fixture
def recorded(monkeypatch):
    """Replace the network call with a recorder."""
    calls: list[dict] = []

    async def fake_deliver(payload, *, client=None):
        calls.append(payload)
        return True

    monkeypatch.setattr(automation_outbound_service, "deliver_event", fake_deliver)
    return calls


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================================
# deliver_event
# =============================================================================

@pytest.mark.asyncio
async def test_deliver_event_posts_with_source_and_secret(automation_url):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["headers"] = request.headers
        captured["body"] = json.loads(request.content)
        return httpx.Response(200)

    payload = {"event": "case_created", "case_id": "abc"}
    async with _mock_client(handler) as client:
        ok = await automation_outbound_service.deliver_event(payload, client=client)

    assert ok is True
    assert captured["url"] == AUTOMATION_URL
    assert captured["headers"]["x-source"] == "fixmypidge"
    assert captured["headers"]["x-webhook-secret"] == "test-webhook-secret"
    assert captured["body"] == payload


@pytest.mark.asyncio
async def test_deliver_event_omits_secret_when_unconfigured(automation_url, monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", "")
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["headers"] = request.headers
        return httpx.Response(204)

    async with _mock_client(handler) as client:
        assert await automation_outbound_service.deliver_event({"event": "x"}, client=client)

    assert "x-webhook-secret" not in captured["headers"]


@pytest.mark.asyncio
async def test_deliver_event_non_2xx_returns_false(automation_url, caplog):
    caplog.set_level(logging.WARNING)
    async with _mock_client(lambda request: httpx.Response(500)) as client:
        ok = await automation_outbound_service.deliver_event({"event": "x"}, client=client)

    assert ok is False
    assert "returned 500" in caplog.text
    # Query string (may carry tokens) never reaches the log
    assert "token=abc" not in caplog.text


@pytest.mark.asyncio
async def test_deliver_event_network_error_returns_false(automation_url):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _mock_client(handler) as client:
        assert await automation_outbound_service.deliver_event({"event": "x"}, client=client) is False


@pytest.mark.asyncio
async def test_deliver_event_without_url_is_skipped():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    async with _mock_client(handler) as client:
        assert await automation_outbound_service.deliver_event({"event": "x"}, client=client) is False
    assert calls == []


def test_safe_url_strips_query():
    assert automation_outbound_service.safe_url(AUTOMATION_URL) == (
        "https://automation.test/webhook/fixmypidge"
    )
    assert automation_outbound_service.safe_url(None) == ""


# =============================================================================
# dispatch_event
# =============================================================================

def test_dispatch_without_url_is_noop():
    assert automation_outbound_service.dispatch_event({"event": "x"}) is None


def test_dispatch_without_running_loop_is_dropped(automation_url):
    assert automation_outbound_service.dispatch_event({"event": "x"}) is None


@pytest.mark.asyncio
async def test_dispatch_runs_in_background(automation_url, recorded):
    task = automation_outbound_service.dispatch_event({"event": "case_created"})

    assert task is not None
    assert automation_outbound_service.pending_count() == 1
    await automation_outbound_service.drain_pending()

    assert recorded == [{"event": "case_created"}]
    assert automation_outbound_service.pending_count() == 0


# =============================================================================
# Case and message notifications
# =============================================================================

@pytest.mark.asyncio
async def test_create_case_emits_case_created(authed_client, automation_url, recorded, test_auth):
    res = await authed_client.post(
        "/cases",
        json={"title": "Pigeon", "location": {"lat": 51.5, "lng": -0.12}, "address": "Trafalgar Sq"},
    )
    await automation_outbound_service.drain_pending()

    assert res.status_code == 201
    assert len(recorded) == 1
    payload = recorded[0]
    assert payload["event"] == "case_created"
    assert payload["case_id"] == res.json()["id"]
    assert payload["case"]["owner_id"] == test_auth.user_id
    assert payload["case"]["status"] == "new"
    assert payload["case"]["location"] == {"lat": 51.5, "lng": -0.12}


@pytest.mark.asyncio
async def test_send_message_emits_message_sent(authed_client, automation_url, recorded):
    case_id = (await authed_client.post("/cases", json={"title": "Pigeon"})).json()["id"]

    res = await authed_client.post(f"/cases/{case_id}/messages", json={"content": "It is eating"})
    await automation_outbound_service.drain_pending()

    assert res.status_code == 201
    assert [p["event"] for p in recorded] == ["case_created", "message_sent"]
    payload = recorded[1]
    assert payload["case_id"] == case_id
    assert payload["message_id"] == res.json()["id"]
    assert payload["message"]["content"] == "It is eating"
    assert payload["message"]["sender_type"] == "citizen"


@pytest.mark.asyncio
async def test_delivery_failure_does_not_fail_the_request(
    authed_client, automation_url, monkeypatch, caplog
):
    async def broken_deliver(payload, *, client=None):
        raise RuntimeError("pipeline exploded")

    monkeypatch.setattr(automation_outbound_service, "deliver_event", broken_deliver)
    caplog.set_level(logging.ERROR)

    res = await authed_client.post("/cases", json={"title": "Pigeon"})
    await automation_outbound_service.drain_pending()

    assert res.status_code == 201
    assert "Automation delivery crashed" in caplog.text

    listed = await authed_client.get("/cases")
    assert [c["id"] for c in listed.json()] == [res.json()["id"]]


# =============================================================================
# /webhooks/notify relay
# =============================================================================

@pytest.mark.asyncio
async def test_notify_requires_secret(client, automation_url, recorded):
    res = await client.post("/webhooks/notify", json={"event": "ping"})
    assert res.status_code == 401
    assert recorded == []


@pytest.mark.asyncio
async def test_notify_forwards_body(client, automation_url, recorded, webhook_headers):
    res = await client.post(
        "/webhooks/notify", json={"event": "ping", "n": 1}, headers=webhook_headers
    )
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert recorded == [{"event": "ping", "n": 1}]


@pytest.mark.asyncio
async def test_notify_without_url_is_unavailable(client, webhook_headers):
    res = await client.post("/webhooks/notify", json={"event": "ping"}, headers=webhook_headers)
    assert res.status_code == 503


@pytest.mark.asyncio
async def test_notify_reports_upstream_failure(client, automation_url, webhook_headers, monkeypatch):
    async def failing_deliver(payload, *, client=None):
        return False

    monkeypatch.setattr(automation_outbound_service, "deliver_event", failing_deliver)

    res = await client.post("/webhooks/notify", json={"event": "ping"}, headers=webhook_headers)
    assert res.status_code == 502
