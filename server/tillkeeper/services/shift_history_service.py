"""
Shift History Service

Read-only reporting over closed cash drawers: period and employee filters,
search, sorting, per-shift statistics and totals.
"""
from typing import Optional, Dict, List, Any, Iterable, Tuple
from uuid import UUID
from datetime import datetime, date, time, timedelta
import enum
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from tillkeeper.core.exceptions import ValidationError
from tillkeeper.core.money import to_decimal
from tillkeeper.models.cash_drawer import CashDrawer
from tillkeeper.services.cash_drawer_service import drawer_load_options
from tillkeeper.services.reconciliation_service import (
    calculate_shift_stats,
    aggregate_shift_stats,
)
from tillkeeper.services.timezone_service import (
    END_OF_DAY,
    utc_now,
    ensure_utc,
    get_business_timezone,
    get_utc_range_for_date_range,
)


class ShiftPeriod(str, enum.Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"
    CUSTOM = "custom"


class ShiftSort(str, enum.Enum):
    DATE = "date"
    AMOUNT = "amount"
    DIFFERENCE = "difference"


PERIOD_DAYS = {
    ShiftPeriod.WEEK: 7,
    ShiftPeriod.MONTH: 30,
}


def resolve_period_range(
    period: ShiftPeriod,
    now: Optional[datetime] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    timezone_str: Optional[str] = None,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Turn a period filter into an inclusive (start, end) UTC range on closed_at.

    today      local midnight to 23:59:59.999 local
    week/month the last 7/30 days up to the end of today
    custom     start_date 00:00 to end_date 23:59:59.999, either side may be open
    all        no bounds
    """
    period = ShiftPeriod(period)
    now = ensure_utc(now or utc_now())
    tz = get_business_timezone(timezone_str)
    today = now.astimezone(tz).date()

    if period == ShiftPeriod.ALL:
        return None, None

    if period == ShiftPeriod.TODAY:
        return get_utc_range_for_date_range(today, today, timezone_str)

    if period in PERIOD_DAYS:
        _, end = get_utc_range_for_date_range(today, today, timezone_str)
        return now - timedelta(days=PERIOD_DAYS[period]), end

    if start_date is None and end_date is None:
        raise ValidationError("A custom range needs a start date or an end date", code="INVALID_DATE_RANGE")
    if start_date and end_date and start_date > end_date:
        raise ValidationError("Start date must be on or before end date", code="INVALID_DATE_RANGE")

    start = end = None
    if start_date:
        start = ensure_utc(tz.localize(datetime.combine(start_date, time.min)))
    if end_date:
        end = ensure_utc(tz.localize(datetime.combine(end_date, END_OF_DAY)))
    return start, end


def _employee_name(drawer: CashDrawer) -> str:
    return drawer.employee.name if drawer.employee else "Unknown"


def search_drawers(drawers: Iterable[CashDrawer], search: Optional[str] = None) -> List[CashDrawer]:
    """Keep drawers whose id, employee name or amounts contain the search term."""
    term = (search or "").strip().lower()
    if not term:
        return list(drawers)
    matches = []
    for drawer in drawers:
        haystack = [
            str(drawer.id).lower(),
            _employee_name(drawer).lower(),
            str(drawer.opening_amount),
            str(drawer.closing_amount) if drawer.closing_amount is not None else "",
        ]
        if any(term in value for value in haystack):
            matches.append(drawer)
    return matches


def sort_drawers(drawers: Iterable[CashDrawer], sort_by: ShiftSort = ShiftSort.DATE) -> List[CashDrawer]:
    sort_by = ShiftSort(sort_by)
    if sort_by == ShiftSort.AMOUNT:
        key = lambda d: to_decimal(d.closing_amount)
    elif sort_by == ShiftSort.DIFFERENCE:
        key = lambda d: abs(to_decimal(d.difference))
    else:
        key = lambda d: ensure_utc(d.closed_at)
    return sorted(drawers, key=key, reverse=True)


def summarize_shift(drawer: CashDrawer) -> Dict[str, Any]:
    """One row of the shift history report."""
    stats = calculate_shift_stats(drawer.transactions)
    opened_at = ensure_utc(drawer.opened_at)
    closed_at = ensure_utc(drawer.closed_at)
    duration_minutes = 0
    if opened_at and closed_at:
        duration_minutes = int((closed_at - opened_at).total_seconds() // 60)

    return {
        "drawer_id": drawer.id,
        "employee_id": drawer.employee_id,
        "employee_name": _employee_name(drawer),
        "opened_at": opened_at,
        "closed_at": closed_at,
        "duration_minutes": duration_minutes,
        "opening_amount": to_decimal(drawer.opening_amount),
        "closing_amount": to_decimal(drawer.closing_amount),
        "expected_amount": to_decimal(drawer.expected_amount),
        "net_cash_movement": to_decimal(drawer.net_cash_movement),
        "difference": to_decimal(drawer.difference),
        "denomination_mismatch": drawer.denomination_mismatch,
        "cash_drop_count": len(drawer.cash_drops or []),
        "cash_pickup_count": len(drawer.cash_pickups or []),
        "note_count": len(drawer.shift_notes or []),
        **stats,
    }


def group_by_employee(shifts: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Per employee totals, in order of first appearance."""
    grouped: Dict[UUID, List[Dict[str, Any]]] = {}
    names: Dict[UUID, str] = {}
    for shift in shifts:
        grouped.setdefault(shift["employee_id"], []).append(shift)
        names[shift["employee_id"]] = shift["employee_name"]

    totals = []
    for employee_id, employee_shifts in grouped.items():
        summary = aggregate_shift_stats(employee_shifts)
        totals.append({
            "employee_id": employee_id,
            "employee_name": names[employee_id],
            **summary,
        })
    return totals


async def get_shift_history(
    db: AsyncSession,
    period: ShiftPeriod = ShiftPeriod.ALL,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    employee_id: Optional[UUID] = None,
    search: Optional[str] = None,
    sort_by: ShiftSort = ShiftSort.DATE,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Closed shifts matching the filters, with per-shift stats, totals and per employee totals."""
    start, end = resolve_period_range(period, now=now, start_date=start_date, end_date=end_date)

    query = (
        select(CashDrawer)
        .options(*drawer_load_options())
        .where(CashDrawer.closed_at.isnot(None))
    )
    if employee_id:
        query = query.where(CashDrawer.employee_id == employee_id)
    if start:
        query = query.where(CashDrawer.closed_at >= start)
    if end:
        query = query.where(CashDrawer.closed_at <= end)

    result = await db.execute(query.execution_options(populate_existing=True))
    drawers = search_drawers(result.scalars().all(), search)
    shifts = [summarize_shift(d) for d in sort_drawers(drawers, sort_by)]

    return {
        "period": ShiftPeriod(period).value,
        "range_start": start,
        "range_end": end,
        "shifts": shifts,
        "summary": aggregate_shift_stats(shifts),
        "employee_totals": group_by_employee(shifts),
    }
