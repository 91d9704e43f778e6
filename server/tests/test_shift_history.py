import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tillkeeper.core.exceptions import ValidationError
from tillkeeper.models.cash_drawer import CashDrawer
from tillkeeper.models.employee import Employee
from tillkeeper.services.shift_history_service import (
    ShiftPeriod,
    ShiftSort,
    resolve_period_range,
    search_drawers,
    get_shift_history,
)
from tillkeeper.services.timezone_service import utc_now

# Noon in Manila
NOW = datetime(2026, 10, 18, 4, 0, tzinfo=timezone.utc)


async def add_closed_drawer(
    db: AsyncSession,
    employee: Employee,
    closed_at: datetime,
    closing: str = "1000",
    difference: str = "0",
) -> CashDrawer:
    drawer = CashDrawer(
        employee_id=employee.id,
        opening_amount=Decimal("1000"),
        opened_at=closed_at - timedelta(hours=8),
        closing_amount=Decimal(closing),
        expected_amount=Decimal("1000"),
        net_cash_movement=Decimal("0"),
        difference=Decimal(difference),
        closed_at=closed_at,
    )
    db.add(drawer)
    await db.commit()
    return drawer


def test_today_covers_the_local_business_day():
    start, end = resolve_period_range(ShiftPeriod.TODAY, now=NOW, timezone_str="Asia/Manila")
    assert start == datetime(2026, 10, 17, 16, 0, tzinfo=timezone.utc)
    assert end == datetime(2026, 10, 18, 15, 59, 59, 999000, tzinfo=timezone.utc)


def test_week_and_month_run_back_from_now_to_end_of_today():
    week_start, week_end = resolve_period_range(ShiftPeriod.WEEK, now=NOW, timezone_str="Asia/Manila")
    month_start, month_end = resolve_period_range(ShiftPeriod.MONTH, now=NOW, timezone_str="Asia/Manila")

    assert week_start == NOW - timedelta(days=7)
    assert month_start == NOW - timedelta(days=30)
    assert week_end == month_end == datetime(2026, 10, 18, 15, 59, 59, 999000, tzinfo=timezone.utc)


def test_custom_range_is_inclusive_of_end_date():
    start, end = resolve_period_range(
        ShiftPeriod.CUSTOM,
        now=NOW,
        start_date=date(2026, 10, 1),
        end_date=date(2026, 10, 5),
        timezone_str="UTC",
    )
    assert start == datetime(2026, 10, 1, 0, 0, tzinfo=timezone.utc)
    assert end == datetime(2026, 10, 5, 23, 59, 59, 999000, tzinfo=timezone.utc)


def test_custom_range_open_ended():
    start, end = resolve_period_range(
        ShiftPeriod.CUSTOM, now=NOW, start_date=date(2026, 10, 1), timezone_str="UTC"
    )
    assert start == datetime(2026, 10, 1, tzinfo=timezone.utc)
    assert end is None


def test_custom_range_validation():
    with pytest.raises(ValidationError):
        resolve_period_range(ShiftPeriod.CUSTOM, now=NOW)
    with pytest.raises(ValidationError) as exc_info:
        resolve_period_range(
            ShiftPeriod.CUSTOM,
            now=NOW,
            start_date=date(2026, 10, 5),
            end_date=date(2026, 10, 1),
        )
    assert exc_info.value.detail["error"] == "INVALID_DATE_RANGE"


def test_all_has_no_bounds():
    assert resolve_period_range(ShiftPeriod.ALL, now=NOW) == (None, None)


@pytest.mark.asyncio
async def test_last_seven_days_excludes_older_shifts(db: AsyncSession, cashier: Employee):
    now = utc_now()
    await add_closed_drawer(db, cashier, now - timedelta(days=8))
    recent = await add_closed_drawer(db, cashier, now - timedelta(days=2))

    history = await get_shift_history(db, period=ShiftPeriod.WEEK, now=now)

    assert [s["drawer_id"] for s in history["shifts"]] == [recent.id]
    assert history["summary"]["total_shifts"] == 1


@pytest.mark.asyncio
async def test_all_period_returns_every_closed_shift_newest_first(db: AsyncSession, cashier: Employee):
    now = utc_now()
    older = await add_closed_drawer(db, cashier, now - timedelta(days=40))
    newer = await add_closed_drawer(db, cashier, now - timedelta(hours=1))
    open_drawer = CashDrawer(
        employee_id=cashier.id,
        active_employee_id=cashier.id,
        opening_amount=Decimal("500"),
        opened_at=now,
    )
    db.add(open_drawer)
    await db.commit()

    history = await get_shift_history(db, period=ShiftPeriod.ALL, now=now)

    assert [s["drawer_id"] for s in history["shifts"]] == [newer.id, older.id]


@pytest.mark.asyncio
async def test_custom_range_and_employee_filter_follow_business_day(
    db: AsyncSession,
    cashier: Employee,
    other_cashier: Employee,
):
    # 23:00 and 00:30 Manila time on either side of midnight
    late_evening = await add_closed_drawer(db, cashier, datetime(2026, 10, 17, 15, 0, tzinfo=timezone.utc))
    await add_closed_drawer(db, cashier, datetime(2026, 10, 17, 16, 30, tzinfo=timezone.utc))
    await add_closed_drawer(db, other_cashier, datetime(2026, 10, 17, 6, 0, tzinfo=timezone.utc))

    history = await get_shift_history(
        db,
        period=ShiftPeriod.CUSTOM,
        start_date=date(2026, 10, 17),
        end_date=date(2026, 10, 17),
        employee_id=cashier.id,
        now=NOW,
    )

    assert [s["drawer_id"] for s in history["shifts"]] == [late_evening.id]


def test_search_drawers_matches_name_id_and_amounts():
    ana = CashDrawer(opening_amount=Decimal("1000"), closing_amount=Decimal("990.00"))
    ana.employee = Employee(name="Ana Cruz")
    paolo = CashDrawer(opening_amount=Decimal("1500"), closing_amount=None)
    paolo.employee = Employee(name="Paolo Garcia")

    assert search_drawers([ana, paolo], "  PAOLO ") == [paolo]
    assert search_drawers([ana, paolo], "990") == [ana]
    assert search_drawers([ana, paolo], "") == [ana, paolo]
    assert search_drawers([ana, paolo], "nobody") == []


@pytest.mark.asyncio
async def test_search_sort_and_employee_totals(
    db: AsyncSession,
    cashier: Employee,
    other_cashier: Employee,
):
    now = utc_now()
    await add_closed_drawer(db, cashier, now - timedelta(hours=5), closing="990", difference="-10")
    await add_closed_drawer(db, cashier, now - timedelta(hours=3), closing="1000", difference="0")
    big_miss = await add_closed_drawer(db, other_cashier, now - timedelta(hours=1), closing="1050", difference="50")

    by_difference = await get_shift_history(db, sort_by=ShiftSort.DIFFERENCE, now=now)
    assert by_difference["shifts"][0]["drawer_id"] == big_miss.id
    assert [s["difference"] for s in by_difference["shifts"]] == [
        Decimal("50.00"), Decimal("-10.00"), Decimal("0.00"),
    ]

    by_amount = await get_shift_history(db, sort_by=ShiftSort.AMOUNT, now=now)
    assert [s["closing_amount"] for s in by_amount["shifts"]] == [
        Decimal("1050.00"), Decimal("1000.00"), Decimal("990.00"),
    ]

    searched = await get_shift_history(db, search="paolo", now=now)
    assert [s["drawer_id"] for s in searched["shifts"]] == [big_miss.id]

    totals = {t["employee_name"]: t for t in by_difference["employee_totals"]}
    assert totals["Ana Cruz"]["total_shifts"] == 2
    assert totals["Ana Cruz"]["total_difference"] == Decimal("-10.00")
    assert totals["Ana Cruz"]["has_net_shortage"] is True
    assert totals["Paolo Garcia"]["has_net_shortage"] is False
    assert by_difference["summary"]["total_difference"] == Decimal("40.00")


@pytest.mark.asyncio
async def test_shift_history_endpoint(
    client: AsyncClient,
    db: AsyncSession,
    cashier: Employee,
    other_cashier: Employee,
    manager_headers: dict,
    cashier_headers: dict,
):
    now = utc_now()
    await add_closed_drawer(db, cashier, now - timedelta(days=8), difference="-5")
    await add_closed_drawer(db, cashier, now - timedelta(days=2), difference="-10")
    await add_closed_drawer(db, other_cashier, now - timedelta(days=1), difference="20")

    response = await client.get(
        "/api/v1/shift-history",
        params={"period": "week", "sortBy": "date"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["period"] == "week"
    assert len(data["shifts"]) == 2
    assert data["summary"]["totalShifts"] == 2
    assert Decimal(data["summary"]["totalDifference"]) == Decimal("10.00")
    assert len(data["employeeTotals"]) == 2

    # Cashiers only see their own shifts, whatever employee they ask for
    response = await client.get(
        "/api/v1/shift-history",
        params={"period": "all", "employeeId": str(other_cashier.id)},
        headers=cashier_headers,
    )
    assert response.status_code == 200
    shifts = response.json()["shifts"]
    assert len(shifts) == 2
    assert {s["employeeId"] for s in shifts} == {str(cashier.id)}


@pytest.mark.asyncio
async def test_shift_history_rejects_bad_custom_range(client: AsyncClient, manager_headers: dict):
    response = await client.get(
        "/api/v1/shift-history",
        params={"period": "custom", "startDate": "2026-10-05", "endDate": "2026-10-01"},
        headers=manager_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "INVALID_DATE_RANGE"

    response = await client.get(
        "/api/v1/shift-history",
        params={"period": "fortnight"},
        headers=manager_headers,
    )
    assert response.status_code == 422
