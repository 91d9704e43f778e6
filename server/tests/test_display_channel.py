import pytest
from datetime import timedelta
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tillkeeper.core.exceptions import ValidationError
from tillkeeper.models.display_event import DisplayEventKind
from tillkeeper.services.display_channel_service import (
    publish_event,
    get_current_events,
    acknowledge_event,
    validate_payload,
)
from tillkeeper.services.timezone_service import utc_now

API = "/api/v1/display"

ORDER = {
    "orderId": "A-1001",
    "items": [
        {"name": "Chicken Adobo", "quantity": 2, "unitPrice": 180, "lineTotal": 360},
        {"name": "Iced Tea", "quantity": 1, "unitPrice": "45.00"},
    ],
    "subtotal": 405,
    "tax": "48.60",
    "serviceCharge": 0,
    "totalAmount": "453.60",
    "orderType": "DINE_IN",
}

PAYMENT = {
    "orderId": "A-1001",
    "amount": "453.60",
    "method": "GCASH",
    "redirectUrl": "https://pay.example.com/qr/A-1001",
}


def test_validate_payload_normalizes_to_camel_case():
    data = validate_payload(DisplayEventKind.PENDING_ORDER, ORDER)
    assert data["orderId"] == "A-1001"
    assert data["items"][0]["unitPrice"] == "180"
    assert data["discountTotal"] == "0"


def test_validate_payload_rejects_incomplete_order():
    with pytest.raises(ValidationError) as exc_info:
        validate_payload(DisplayEventKind.PENDING_ORDER, {"orderId": "A-1", "items": []})
    assert exc_info.value.detail["error"] == "INVALID_DISPLAY_PAYLOAD"

    with pytest.raises(ValidationError):
        validate_payload(DisplayEventKind.PENDING_PAYMENT, None)


def test_clear_needs_no_payload():
    assert validate_payload(DisplayEventKind.CLEAR, None) == {}


@pytest.mark.asyncio
async def test_publish_and_poll_current(client: AsyncClient, cashier_headers: dict):
    response = await client.post(
        f"{API}/events",
        json={"terminalId": "counter-1", "kind": "PENDING_ORDER", "payload": ORDER},
        headers=cashier_headers,
    )
    assert response.status_code == 201
    order_event = response.json()
    assert order_event["acknowledgedAt"] is None
    assert order_event["payload"]["totalAmount"] == "453.60"

    response = await client.get(f"{API}/terminals/counter-1/current", headers=cashier_headers)
    assert response.status_code == 200
    current = response.json()
    assert current["pendingOrder"]["id"] == order_event["id"]
    assert current["pendingPayment"] is None

    # Other terminals are unaffected
    response = await client.get(f"{API}/terminals/counter-2/current", headers=cashier_headers)
    assert response.json()["pendingOrder"] is None


@pytest.mark.asyncio
async def test_newer_event_supersedes_older(client: AsyncClient, cashier_headers: dict):
    first = (await client.post(
        f"{API}/events",
        json={"terminalId": "counter-1", "kind": "PENDING_ORDER", "payload": ORDER},
        headers=cashier_headers,
    )).json()
    second = (await client.post(
        f"{API}/events",
        json={"terminalId": "counter-1", "kind": "PENDING_ORDER", "payload": {**ORDER, "orderId": "A-1002"}},
        headers=cashier_headers,
    )).json()
    payment = (await client.post(
        f"{API}/events",
        json={"terminalId": "counter-1", "kind": "PENDING_PAYMENT", "payload": PAYMENT},
        headers=cashier_headers,
    )).json()

    current = (await client.get(f"{API}/terminals/counter-1/current", headers=cashier_headers)).json()
    assert current["pendingOrder"]["id"] == second["id"]
    assert current["pendingOrder"]["payload"]["orderId"] == "A-1002"
    assert current["pendingPayment"]["id"] == payment["id"]

    response = await client.post(f"{API}/events/{first['id']}/ack", headers=cashier_headers)
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "DISPLAY_EVENT_ACKNOWLEDGED"


@pytest.mark.asyncio
async def test_clear_removes_everything(client: AsyncClient, cashier_headers: dict):
    for kind, payload in (("PENDING_ORDER", ORDER), ("PENDING_PAYMENT", PAYMENT)):
        await client.post(
            f"{API}/events",
            json={"terminalId": "counter-1", "kind": kind, "payload": payload},
            headers=cashier_headers,
        )

    response = await client.post(
        f"{API}/events",
        json={"terminalId": "counter-1", "kind": "CLEAR"},
        headers=cashier_headers,
    )
    assert response.status_code == 201

    current = (await client.get(f"{API}/terminals/counter-1/current", headers=cashier_headers)).json()
    assert current["pendingOrder"] is None
    assert current["pendingPayment"] is None


@pytest.mark.asyncio
async def test_acknowledge_once(client: AsyncClient, cashier_headers: dict):
    event = (await client.post(
        f"{API}/events",
        json={"terminalId": "counter-1", "kind": "PENDING_PAYMENT", "payload": PAYMENT},
        headers=cashier_headers,
    )).json()

    response = await client.post(f"{API}/events/{event['id']}/ack", headers=cashier_headers)
    assert response.status_code == 200
    assert response.json()["acknowledgedAt"] is not None

    current = (await client.get(f"{API}/terminals/counter-1/current", headers=cashier_headers)).json()
    assert current["pendingPayment"] is None

    response = await client.post(f"{API}/events/{event['id']}/ack", headers=cashier_headers)
    assert response.status_code == 400

    response = await client.post(f"{API}/events/00000000-0000-0000-0000-000000000000/ack", headers=cashier_headers)
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "DISPLAY_EVENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_invalid_payload_rejected(client: AsyncClient, cashier_headers: dict):
    response = await client.post(
        f"{API}/events",
        json={"terminalId": "counter-1", "kind": "PENDING_PAYMENT", "payload": {"orderId": "A-1", "amount": 0, "method": "CASH"}},
        headers=cashier_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "INVALID_DISPLAY_PAYLOAD"


@pytest.mark.asyncio
async def test_events_expire(db: AsyncSession):
    event = await publish_event(db, "counter-9", DisplayEventKind.PENDING_ORDER, ORDER, ttl_seconds=60)
    await db.commit()

    live = await get_current_events(db, "counter-9")
    assert [e.id for e in live] == [event.id]

    later = utc_now() + timedelta(seconds=120)
    assert await get_current_events(db, "counter-9", now=later) == []


@pytest.mark.asyncio
async def test_publish_requires_terminal(db: AsyncSession):
    with pytest.raises(ValidationError) as exc_info:
        await publish_event(db, "  ", DisplayEventKind.CLEAR)
    assert exc_info.value.detail["error"] == "MISSING_TERMINAL_ID"

    with pytest.raises(ValidationError):
        await publish_event(db, "counter-1", DisplayEventKind.CLEAR, ttl_seconds=0)


@pytest.mark.asyncio
async def test_acknowledge_event_service(db: AsyncSession):
    event = await publish_event(db, "counter-3", DisplayEventKind.PENDING_PAYMENT, PAYMENT)
    await db.commit()

    acked = await acknowledge_event(db, event.id)
    assert acked.acknowledged_at is not None
