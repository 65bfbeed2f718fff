"""Tests for the client-side case store against the in-process API."""

from __future__ import annotations

import httpx
import pytest

from fixmypidge.client import ApiClient, CaseSyncStore
from fixmypidge.core.exceptions import DependencyError, NotFoundError, ValidationError


def _failing_api(status_code: int = 500) -> ApiClient:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(status_code, json={"detail": "store unavailable"})
    )
    return ApiClient("http://test", token="irrelevant", transport=transport)


@pytest.mark.asyncio
async def test_create_case_round_trip(store: CaseSyncStore, test_auth):
    case_id = await store.create_case({"title": "Pigeon", "category": "wing_injury"})

    assert [c.id for c in store.cases] == [case_id]
    case = store.cases[0]
    assert case.status == "new"
    assert case.owner_id == test_auth.user_id
    assert case.messages == []
    assert case.photos == []
    assert store.loading is False
    assert store.last_error is None


@pytest.mark.asyncio
async def test_send_message_refreshes_current_case(store: CaseSyncStore):
    case_id = await store.create_case({"title": "Pigeon"})

    await store.send_message(case_id, "It has a limp")
    await store.send_message(case_id, "Now it is sleeping")

    assert store.current_case is not None
    assert store.current_case.id == case_id
    assert [m.content for m in store.current_case.messages] == [
        "It has a limp",
        "Now it is sleeping",
    ]
    # The list entry is replaced in place
    assert len(store.cases[0].messages) == 2


@pytest.mark.asyncio
async def test_blank_message_is_rejected_without_request(store: CaseSyncStore):
    case_id = await store.create_case({"title": "Pigeon"})
    store.api = _failing_api()

    with pytest.raises(ValidationError):
        await store.send_message(case_id, "   ")


@pytest.mark.asyncio
async def test_failed_list_keeps_previous_cases(store: CaseSyncStore):
    await store.create_case({"title": "Pigeon"})
    previous = list(store.cases)
    store.api = _failing_api()

    with pytest.raises(DependencyError):
        await store.list_cases()

    assert store.cases == previous
    assert isinstance(store.last_error, DependencyError)
    assert store.loading is False


@pytest.mark.asyncio
async def test_get_unknown_case(store: CaseSyncStore):
    with pytest.raises(NotFoundError):
        await store.get_case("00000000-0000-0000-0000-000000000000")
    assert store.current_case is None


@pytest.mark.asyncio
async def test_upload_photo_refreshes_case(store: CaseSyncStore):
    case_id = await store.create_case({"title": "Pigeon"})

    url = await store.upload_photo(case_id, b"\xff\xd8\xff\xe0data", "bird.jpg")

    assert url.endswith("-bird.jpg")
    assert [p.photo_url for p in store.current_case.photos] == [url]


@pytest.mark.asyncio
async def test_upload_rejected_for_foreign_message(store: CaseSyncStore):
    case_a = await store.create_case({"title": "A"})
    case_b = await store.create_case({"title": "B"})
    await store.send_message(case_b, "Only on B")
    message_b = store.current_case.messages[0].id

    with pytest.raises(ValidationError):
        await store.upload_photo(case_a, b"\xff\xd8\xff\xe0data", "bird.jpg", message_id=message_b)

    await store.get_case(case_a)
    assert store.current_case.photos == []


@pytest.mark.asyncio
async def test_expert_reply_then_citizen_reply(store: CaseSyncStore, client, webhook_headers):
    case_id = await store.create_case({"title": "Pigeon on the balcony"})

    res = await client.post(
        "/webhooks/automation",
        json={
            "event": "expert_message",
            "case_id": str(case_id),
            "message": {"content": "Is it able to fly?", "expert_id": "vet-1"},
            "status_update": "answered",
        },
        headers=webhook_headers,
    )
    assert res.status_code == 200

    case = await store.get_case(case_id)
    assert case.status == "answered"
    assert [(m.sender_type, m.content) for m in case.messages] == [
        ("expert", "Is it able to fly?"),
    ]

    await store.send_message(case_id, "No, it just hops")

    case = store.current_case
    assert case.status == "answered"
    assert [(m.sender_type, m.content) for m in case.messages] == [
        ("expert", "Is it able to fly?"),
        ("citizen", "No, it just hops"),
    ]
