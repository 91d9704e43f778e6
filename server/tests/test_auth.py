import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tillkeeper.models.employee import Employee, EmployeeRole, EmployeeStatus

from conftest import create_employee


@pytest.mark.asyncio
async def test_pin_login(client: AsyncClient, cashier: Employee):
    """Test PIN login at the register."""
    response = await client.post(
        "/api/v1/auth/pin-login",
        json={"employeeId": str(cashier.id), "pin": "5678"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["tokenType"] == "bearer"
    assert data["employee"]["name"] == "Ana Cruz"
    assert data["employee"]["role"] == "CASHIER"

    me = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {data['accessToken']}"},
    )
    assert me.status_code == 200
    assert me.json()["id"] == str(cashier.id)


@pytest.mark.asyncio
async def test_pin_login_wrong_pin(client: AsyncClient, cashier: Employee):
    response = await client.post(
        "/api/v1/auth/pin-login",
        json={"employeeId": str(cashier.id), "pin": "0000"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_pin_login_unknown_employee(client: AsyncClient):
    response = await client.post(
        "/api/v1/auth/pin-login",
        json={"employeeId": "00000000-0000-0000-0000-000000000000", "pin": "1234"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_pin_login_rejects_non_digit_pin(client: AsyncClient, cashier: Employee):
    response = await client.post(
        "/api/v1/auth/pin-login",
        json={"employeeId": str(cashier.id), "pin": "abcd"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_inactive_employee_cannot_log_in(client: AsyncClient, db: AsyncSession):
    former = await create_employee(db, "Former Staff", pin="4321", status=EmployeeStatus.INACTIVE)
    response = await client.post(
        "/api/v1/auth/pin-login",
        json={"employeeId": str(former.id), "pin": "4321"},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_employees(
    client: AsyncClient,
    db: AsyncSession,
    cashier: Employee,
    manager: Employee,
    cashier_headers: dict,
):
    await create_employee(db, "Zed Former", EmployeeRole.CASHIER, status=EmployeeStatus.INACTIVE)

    response = await client.get("/api/v1/employees", headers=cashier_headers)
    assert response.status_code == 200
    assert [e["name"] for e in response.json()] == ["Ana Cruz", "Jose Reyes"]

    response = await client.get(
        "/api/v1/employees",
        params={"includeInactive": "true"},
        headers=cashier_headers,
    )
    assert [e["name"] for e in response.json()] == ["Ana Cruz", "Jose Reyes", "Zed Former"]
