"""
Transaction Service

Records completed sales with their payment legs and attributes them to the
cashier's drawer.
"""
from typing import Optional, List, Any
from uuid import UUID
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from tillkeeper.core.exceptions import ValidationError
from tillkeeper.core.money import parse_amount
from tillkeeper.models.transaction import (
    Transaction,
    Payment,
    PaymentMethod,
    TransactionStatus,
    OrderType,
)
from tillkeeper.services import cash_drawer_service
from tillkeeper.services.timezone_service import utc_now

logger = logging.getLogger(__name__)


async def get_transaction(db: AsyncSession, transaction_id: UUID) -> Optional[Transaction]:
    """Get transaction by ID with payments."""
    result = await db.execute(select(Transaction).where(Transaction.id == transaction_id))
    return result.scalar_one_or_none()


async def create_transaction(
    db: AsyncSession,
    employee_id: UUID,
    total_amount: Any,
    payments: List[dict],
    tip: Any = 0,
    status: TransactionStatus = TransactionStatus.COMPLETED,
    order_type: OrderType = OrderType.DINE_IN,
    notes: Optional[str] = None,
    drawer_id: Optional[UUID] = None,
) -> Transaction:
    """
    Record a sale.

    When drawer_id is given the sale is attributed to that drawer; otherwise it
    goes to the employee's active drawer if one is open.
    """
    total = parse_amount(total_amount, "Total amount")
    tip_amount = parse_amount(tip, "Tip", required=False) or 0

    if not payments:
        raise ValidationError("At least one payment is required", code="MISSING_PAYMENTS")

    payment_rows = []
    for payment in payments:
        method = PaymentMethod(payment["method"])
        amount = parse_amount(payment.get("amount"), f"{method.value} payment amount", allow_zero=False)
        payment_rows.append(Payment(method=method, amount=amount, reference=payment.get("reference")))

    paid = sum((p.amount for p in payment_rows), 0)
    if paid < total:
        raise ValidationError(
            f"Payments ({paid}) do not cover the total amount ({total})",
            code="INSUFFICIENT_PAYMENT",
        )

    transaction = Transaction(
        employee_id=employee_id,
        total_amount=total,
        tip=tip_amount,
        status=status,
        order_type=order_type,
        notes=notes,
        created_at=utc_now(),
        payments=payment_rows,
    )
    db.add(transaction)
    await db.flush()

    if drawer_id is None:
        active = await cash_drawer_service.get_active_cash_drawer(db, employee_id)
        if active:
            drawer_id = active.id

    if drawer_id is not None:
        await cash_drawer_service.attach_transaction(db, drawer_id, transaction.id, employee_id)
    else:
        logger.info(f"Transaction {transaction.id} recorded without an open cash drawer")

    return transaction
