from decimal import Decimal
from types import SimpleNamespace

from tillkeeper.models.transaction import PaymentMethod, TransactionStatus
from tillkeeper.services.reconciliation_service import (
    calculate_cash_sales,
    calculate_expected_amount,
    calculate_net_cash_movement,
    calculate_total_expected_cash,
    calculate_variance,
    build_reconciliation,
    calculate_shift_stats,
    aggregate_shift_stats,
)


def payment(method, amount):
    return SimpleNamespace(method=method, amount=Decimal(str(amount)))


def sale(total, *payments, status=TransactionStatus.COMPLETED, tip=0):
    return SimpleNamespace(
        total_amount=Decimal(str(total)),
        tip=Decimal(str(tip)),
        status=status,
        payments=list(payments),
    )


def movement(amount):
    return SimpleNamespace(amount=Decimal(str(amount)))


def drawer(opening, transactions=(), drops=(), pickups=(), **closed):
    return SimpleNamespace(
        id="drawer-1",
        opening_amount=Decimal(str(opening)),
        transactions=list(transactions),
        cash_drops=list(drops),
        cash_pickups=list(pickups),
        closed_at=closed.get("closed_at"),
        expected_amount=closed.get("expected_amount"),
        net_cash_movement=closed.get("net_cash_movement"),
        closing_amount=closed.get("closing_amount"),
        difference=closed.get("difference"),
        denomination_breakdown=closed.get("denomination_breakdown"),
    )


def test_expected_amount_counts_only_cash_legs():
    transactions = [
        sale(500, payment(PaymentMethod.CASH, 500)),
        sale(800, payment(PaymentMethod.CREDIT_CARD, 800)),
        sale(250, payment(PaymentMethod.GCASH, 250)),
    ]
    assert calculate_expected_amount(1000, transactions) == Decimal("1500.00")


def test_split_payment_contributes_only_cash_portion():
    split = sale(500, payment(PaymentMethod.CASH, 300), payment(PaymentMethod.GCASH, 200))
    assert calculate_cash_sales([split]) == Decimal("300.00")
    assert calculate_expected_amount(1000, [split]) == Decimal("1300.00")


def test_multiple_cash_legs_are_summed():
    two_cash = sale(400, payment(PaymentMethod.CASH, 150), payment(PaymentMethod.CASH, 250))
    assert calculate_cash_sales([two_cash]) == Decimal("400.00")


def test_voided_transactions_excluded():
    voided = sale(500, payment(PaymentMethod.CASH, 500), status=TransactionStatus.VOIDED)
    assert calculate_expected_amount(1000, [voided]) == Decimal("1000.00")


def test_net_cash_movement_sign_and_order_independence():
    drops = [movement(200), movement(50)]
    pickups = [movement(100)]
    forward = calculate_net_cash_movement(drops, pickups)
    backward = calculate_net_cash_movement(list(reversed(drops)), pickups)
    assert forward == backward == Decimal("-150.00")
    assert calculate_net_cash_movement([], []) == Decimal("0.00")


def test_variance_sign_preserved():
    assert calculate_variance(Decimal("1290"), Decimal("1300")) == Decimal("-10.00")
    assert calculate_variance(Decimal("1310"), Decimal("1300")) == Decimal("10.00")
    assert calculate_variance(Decimal("1300"), Decimal("1300")) == Decimal("0.00")


def test_shift_walkthrough():
    transactions = [sale(500, payment(PaymentMethod.CASH, 500))]
    expected = calculate_expected_amount(1000, transactions)
    net = calculate_net_cash_movement([movement(200)], [])
    total = calculate_total_expected_cash(expected, net)

    assert expected == Decimal("1500.00")
    assert net == Decimal("-200.00")
    assert total == Decimal("1300.00")
    assert calculate_variance(Decimal("1290"), total) == Decimal("-10.00")


def test_build_reconciliation_preview_for_open_drawer():
    open_drawer = drawer(
        1000,
        transactions=[sale(500, payment(PaymentMethod.CASH, 500))],
        drops=[movement(200)],
        pickups=[movement(50)],
    )
    report = build_reconciliation(open_drawer, closing_amount=Decimal("1340"))

    assert report["is_open"] is True
    assert report["cash_sales"] == Decimal("500.00")
    assert report["expected_amount"] == Decimal("1500.00")
    assert report["total_drops"] == Decimal("200.00")
    assert report["total_pickups"] == Decimal("50.00")
    assert report["net_cash_movement"] == Decimal("-150.00")
    assert report["total_expected_cash"] == Decimal("1350.00")
    assert report["variance"] == Decimal("-10.00")
    assert report["transaction_count"] == 1


def test_build_reconciliation_without_count_has_no_variance():
    report = build_reconciliation(drawer(1000))
    assert report["variance"] is None
    assert report["total_expected_cash"] == Decimal("1000.00")


def test_build_reconciliation_closed_drawer_uses_stored_figures():
    closed = drawer(
        1000,
        closed_at="2026-10-18T10:00:00Z",
        expected_amount=Decimal("1600.00"),
        net_cash_movement=Decimal("-200.00"),
        closing_amount=Decimal("1390.00"),
        difference=Decimal("-10.00"),
        denomination_breakdown={"1000": 1, "100": 3, "50": 1, "20": 2},
    )
    report = build_reconciliation(closed)
    assert report["is_open"] is False
    assert report["expected_amount"] == Decimal("1600.00")
    assert report["total_expected_cash"] == Decimal("1400.00")
    assert report["variance"] == Decimal("-10.00")
    assert report["denomination_total"] == Decimal("1390.00")

    report = build_reconciliation(closed, closing_amount=Decimal("5000"))
    assert report["closing_amount"] == Decimal("1390.00")
    assert report["variance"] == Decimal("-10.00")


def test_shift_stats_by_payment_type():
    transactions = [
        sale(500, payment(PaymentMethod.CASH, 300), payment(PaymentMethod.GCASH, 200), tip=20),
        sale(800, payment(PaymentMethod.DEBIT_CARD, 800)),
        sale(100, payment(PaymentMethod.CASH, 100), status=TransactionStatus.VOIDED),
    ]
    stats = calculate_shift_stats(transactions)
    assert stats == {
        "total_sales": Decimal("1300.00"),
        "cash_sales": Decimal("300.00"),
        "card_sales": Decimal("800.00"),
        "mobile_sales": Decimal("200.00"),
        "total_tips": Decimal("20.00"),
        "order_count": 2,
    }


def test_aggregate_shift_stats_flags_net_shortage():
    base = calculate_shift_stats([sale(500, payment(PaymentMethod.CASH, 500))])
    shifts = [
        {**base, "difference": Decimal("-10.00")},
        {**base, "difference": Decimal("5.00")},
    ]
    summary = aggregate_shift_stats(shifts)
    assert summary["total_shifts"] == 2
    assert summary["total_sales"] == Decimal("1000.00")
    assert summary["total_cash"] == Decimal("1000.00")
    assert summary["total_orders"] == 2
    assert summary["total_difference"] == Decimal("-5.00")
    assert summary["has_net_shortage"] is True


def test_aggregate_shift_stats_empty():
    summary = aggregate_shift_stats([])
    assert summary["total_shifts"] == 0
    assert summary["total_difference"] == Decimal("0.00")
    assert summary["has_net_shortage"] is False
