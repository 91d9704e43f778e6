import pytest
from decimal import Decimal
from httpx import AsyncClient

from tillkeeper.models.employee import Employee

from conftest import auth_headers

API = "/api/v1/transactions"


@pytest.mark.asyncio
async def test_record_sale_without_open_drawer(client: AsyncClient, cashier_headers: dict):
    response = await client.post(
        API,
        json={
            "totalAmount": "350.00",
            "tip": 20,
            "orderType": "TAKEOUT",
            "payments": [{"method": "CREDIT_CARD", "amount": "370", "reference": "AUTH-88"}],
        },
        headers=cashier_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert Decimal(data["totalAmount"]) == Decimal("350")
    assert Decimal(data["tip"]) == Decimal("20")
    assert Decimal(data["cashAmount"]) == Decimal("0")
    assert data["status"] == "COMPLETED"
    assert data["payments"][0]["reference"] == "AUTH-88"

    response = await client.get(f"{API}/{data['id']}", headers=cashier_headers)
    assert response.status_code == 200
    assert response.json()["orderType"] == "TAKEOUT"


@pytest.mark.asyncio
async def test_payments_must_cover_total(client: AsyncClient, cashier_headers: dict):
    response = await client.post(
        API,
        json={"totalAmount": 500, "payments": [{"method": "CASH", "amount": 300}]},
        headers=cashier_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "INSUFFICIENT_PAYMENT"

    response = await client.post(API, json={"totalAmount": 500, "payments": []}, headers=cashier_headers)
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "MISSING_PAYMENTS"


@pytest.mark.asyncio
async def test_unknown_payment_method_is_a_shape_error(client: AsyncClient, cashier_headers: dict):
    response = await client.post(
        API,
        json={"totalAmount": 100, "payments": [{"method": "BITCOIN", "amount": 100}]},
        headers=cashier_headers,
    )
    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == "Validation error"
    assert any(error["field"].startswith("payments") for error in body["errors"])


@pytest.mark.asyncio
async def test_sale_on_someone_elses_drawer_is_forbidden(
    client: AsyncClient,
    cashier_headers: dict,
    other_cashier: Employee,
):
    response = await client.post("/api/v1/cash-drawers", json={"openingAmount": 1000}, headers=cashier_headers)
    drawer_id = response.json()["id"]

    response = await client.post(
        API,
        json={"totalAmount": 100, "payments": [{"method": "CASH", "amount": 100}], "drawerId": drawer_id},
        headers=auth_headers(other_cashier),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_transactions_visible_to_owner_and_managers(
    client: AsyncClient,
    cashier_headers: dict,
    manager_headers: dict,
    other_cashier: Employee,
):
    response = await client.post(
        API,
        json={"totalAmount": 100, "payments": [{"method": "CASH", "amount": 100}]},
        headers=cashier_headers,
    )
    transaction_id = response.json()["id"]

    assert (await client.get(f"{API}/{transaction_id}", headers=manager_headers)).status_code == 200
    assert (await client.get(f"{API}/{transaction_id}", headers=auth_headers(other_cashier))).status_code == 404
