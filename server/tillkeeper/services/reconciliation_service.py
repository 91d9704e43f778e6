"""
Reconciliation Service

Pure arithmetic over a drawer's records: expected cash, net cash movement,
variance and per-shift sales statistics. Nothing here touches the database;
callers pass loaded drawers, transactions, drops and pickups.

Sign conventions:
    drops reduce cash on hand (-), pickups add change float (+)
    variance = counted - total expected; positive is an overage, negative a shortage
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from tillkeeper.core.money import CENT, denomination_total, to_decimal
from tillkeeper.models.transaction import (
    PaymentMethod,
    TransactionStatus,
    CARD_METHODS,
    MOBILE_METHODS,
)

ZERO = Decimal("0.00")


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO).quantize(CENT)


def counts_toward_drawer(transaction: Any) -> bool:
    """Voided sales never put money in the drawer."""
    return getattr(transaction, "status", None) != TransactionStatus.VOIDED


def method_total(transaction: Any, methods: Sequence[PaymentMethod]) -> Decimal:
    """Sum of the payment legs of a transaction paid with any of the given methods."""
    if not counts_toward_drawer(transaction):
        return ZERO
    payments = getattr(transaction, "payments", None) or []
    return _sum(to_decimal(p.amount) for p in payments if PaymentMethod(p.method) in methods)


def cash_leg(transaction: Any) -> Decimal:
    """Cash portion of a transaction. Card and mobile legs of a split payment are ignored."""
    return method_total(transaction, (PaymentMethod.CASH,))


def calculate_cash_sales(transactions: Optional[Iterable[Any]]) -> Decimal:
    return _sum(cash_leg(t) for t in (transactions or []))


def calculate_expected_amount(opening_amount: Any, transactions: Optional[Iterable[Any]]) -> Decimal:
    """Opening float plus the cash legs of every attributed transaction."""
    return (to_decimal(opening_amount) + calculate_cash_sales(transactions)).quantize(CENT)


def calculate_net_cash_movement(
    cash_drops: Optional[Iterable[Any]],
    cash_pickups: Optional[Iterable[Any]],
) -> Decimal:
    """-sum(drops) + sum(pickups). Order of the records does not matter."""
    dropped = _sum(to_decimal(d.amount) for d in (cash_drops or []))
    picked_up = _sum(to_decimal(p.amount) for p in (cash_pickups or []))
    return (picked_up - dropped).quantize(CENT)


def calculate_total_expected_cash(expected_amount: Any, net_cash_movement: Any) -> Decimal:
    return (to_decimal(expected_amount) + to_decimal(net_cash_movement)).quantize(CENT)


def calculate_variance(closing_amount: Any, total_expected_cash: Any) -> Decimal:
    """Counted minus expected. The sign is kept: negative means the drawer is short."""
    return (to_decimal(closing_amount) - to_decimal(total_expected_cash)).quantize(CENT)


def build_reconciliation(drawer: Any, closing_amount: Optional[Decimal] = None) -> Dict[str, Any]:
    """
    Everything the cashier sees on the close screen for one drawer.

    For a closed drawer the stored close figures win over recomputation, so the
    report matches what was signed off even if attributions changed later.
    """
    transactions = drawer.transactions or []
    cash_drops = drawer.cash_drops or []
    cash_pickups = drawer.cash_pickups or []

    cash_sales = calculate_cash_sales(transactions)
    if drawer.closed_at is not None and drawer.expected_amount is not None:
        expected_amount = to_decimal(drawer.expected_amount)
    else:
        expected_amount = calculate_expected_amount(drawer.opening_amount, transactions)

    if drawer.closed_at is not None and drawer.net_cash_movement is not None:
        net_cash_movement = to_decimal(drawer.net_cash_movement)
    else:
        net_cash_movement = calculate_net_cash_movement(cash_drops, cash_pickups)

    total_expected_cash = calculate_total_expected_cash(expected_amount, net_cash_movement)

    # A closed drawer always reports its recorded count
    if drawer.closing_amount is not None and (closing_amount is None or drawer.closed_at is not None):
        closing_amount = to_decimal(drawer.closing_amount)

    variance = None
    if drawer.closed_at is not None and drawer.difference is not None:
        variance = to_decimal(drawer.difference)
    elif closing_amount is not None:
        variance = calculate_variance(closing_amount, total_expected_cash)

    counts = drawer.denomination_breakdown or {}

    return {
        "drawer_id": drawer.id,
        "is_open": drawer.closed_at is None,
        "opening_amount": to_decimal(drawer.opening_amount).quantize(CENT),
        "cash_sales": cash_sales,
        "expected_amount": expected_amount,
        "total_drops": _sum(to_decimal(d.amount) for d in cash_drops),
        "total_pickups": _sum(to_decimal(p.amount) for p in cash_pickups),
        "net_cash_movement": net_cash_movement,
        "total_expected_cash": total_expected_cash,
        "closing_amount": closing_amount,
        "variance": variance,
        "denomination_breakdown": counts,
        "denomination_total": denomination_total(counts),
        "transaction_count": len([t for t in transactions if counts_toward_drawer(t)]),
    }


def calculate_shift_stats(transactions: Optional[Iterable[Any]]) -> Dict[str, Any]:
    """Per-shift sales statistics over the drawer's attributed transactions."""
    counted: List[Any] = [t for t in (transactions or []) if counts_toward_drawer(t)]
    return {
        "total_sales": _sum(to_decimal(t.total_amount) for t in counted),
        "cash_sales": _sum(cash_leg(t) for t in counted),
        "card_sales": _sum(method_total(t, CARD_METHODS) for t in counted),
        "mobile_sales": _sum(method_total(t, MOBILE_METHODS) for t in counted),
        "total_tips": _sum(to_decimal(t.tip) for t in counted),
        "order_count": len(counted),
    }


def aggregate_shift_stats(shifts: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Sum per-shift stats across a filtered set of shifts.

    Each item needs the keys produced by calculate_shift_stats plus "difference".
    A negative total_difference signals net shortages over the period.
    """
    shifts = list(shifts)
    total_difference = _sum(to_decimal(s.get("difference")) for s in shifts)
    return {
        "total_shifts": len(shifts),
        "total_sales": _sum(s["total_sales"] for s in shifts),
        "total_cash": _sum(s["cash_sales"] for s in shifts),
        "total_card": _sum(s["card_sales"] for s in shifts),
        "total_mobile": _sum(s["mobile_sales"] for s in shifts),
        "total_tips": _sum(s["total_tips"] for s in shifts),
        "total_orders": sum(s["order_count"] for s in shifts),
        "total_difference": total_difference,
        "has_net_shortage": total_difference < 0,
    }
