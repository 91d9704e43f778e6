"""
Cash Drawer Service

Handles the shift lifecycle of a cash drawer: open, mid-shift cash movements,
notes, sale attribution, denomination counts and close.
"""
from typing import Optional, Dict, List, Any, Mapping
from uuid import UUID
from decimal import Decimal
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from tillkeeper.core.config import settings
from tillkeeper.core.exceptions import ValidationError, ConflictError, NotFoundError
from tillkeeper.core.money import (
    parse_amount,
    normalize_denomination_counts,
    denomination_total,
    format_money,
)
from tillkeeper.models.cash_drawer import (
    CashDrawer,
    CashDrop,
    CashPickup,
    ShiftNote,
    CashDrawerTransaction,
)
from tillkeeper.models.transaction import Transaction
from tillkeeper.services.audit_service import record_audit, AuditAction
from tillkeeper.services.reconciliation_service import (
    calculate_expected_amount,
    calculate_net_cash_movement,
    calculate_total_expected_cash,
    calculate_variance,
)
from tillkeeper.services.timezone_service import utc_now

logger = logging.getLogger("tillkeeper.drawer")

ENTITY_CASH_DRAWER = "cash_drawer"


def drawer_load_options() -> tuple:
    """Eager-load everything a drawer response and reconciliation need."""
    return (
        selectinload(CashDrawer.employee),
        selectinload(CashDrawer.cash_drops),
        selectinload(CashDrawer.cash_pickups),
        selectinload(CashDrawer.shift_notes),
        selectinload(CashDrawer.transaction_links)
        .selectinload(CashDrawerTransaction.transaction)
        .selectinload(Transaction.payments),
    )


def _clean_text(value: Optional[str], field_name: str, code: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field_name} is required", code=code)
    return text


async def get_cash_drawer(db: AsyncSession, drawer_id: UUID) -> Optional[CashDrawer]:
    """Get a cash drawer by ID with its nested collections loaded."""
    result = await db.execute(
        select(CashDrawer)
        .options(*drawer_load_options())
        .where(CashDrawer.id == drawer_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_active_cash_drawer(db: AsyncSession, employee_id: UUID) -> Optional[CashDrawer]:
    """Get the employee's open drawer, if any."""
    result = await db.execute(
        select(CashDrawer)
        .options(*drawer_load_options())
        .where(
            and_(
                CashDrawer.employee_id == employee_id,
                CashDrawer.closed_at.is_(None),
            )
        )
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def list_cash_drawers(
    db: AsyncSession,
    employee_id: Optional[UUID] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[CashDrawer]:
    """List drawers, most recently opened first."""
    query = select(CashDrawer).options(*drawer_load_options())
    if employee_id:
        query = query.where(CashDrawer.employee_id == employee_id)
    query = query.order_by(CashDrawer.opened_at.desc()).limit(limit).offset(offset)
    result = await db.execute(query.execution_options(populate_existing=True))
    return list(result.scalars().all())


async def get_open_cash_drawer_or_raise(db: AsyncSession, drawer_id: UUID) -> CashDrawer:
    drawer = await get_cash_drawer(db, drawer_id)
    if not drawer:
        raise NotFoundError("Cash drawer not found", code="CASH_DRAWER_NOT_FOUND")
    if not drawer.is_open:
        raise ValidationError("Cash drawer is already closed", code="CASH_DRAWER_CLOSED")
    return drawer


async def open_cash_drawer(
    db: AsyncSession,
    employee_id: UUID,
    opening_amount: Any,
) -> CashDrawer:
    """Open a new drawer with the given float for the employee."""
    amount = parse_amount(opening_amount, "Opening amount")

    existing = await get_active_cash_drawer(db, employee_id)
    if existing:
        raise ValidationError(
            "There is already an active cash drawer",
            code="ACTIVE_CASH_DRAWER_EXISTS",
        )

    drawer = CashDrawer(
        employee_id=employee_id,
        active_employee_id=employee_id,
        opening_amount=amount,
        opened_at=utc_now(),
        cash_drops=[],
        cash_pickups=[],
        shift_notes=[],
        transaction_links=[],
    )
    db.add(drawer)
    try:
        # Flush to get the drawer ID and to hit the one-open-drawer constraint
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Concurrent open rejected for employee {employee_id}")
        raise ConflictError(
            "Another cash drawer was opened at the same time. Reload and try again.",
            code="ACTIVE_CASH_DRAWER_EXISTS",
        )

    record_audit(
        db,
        actor_employee_id=employee_id,
        action=AuditAction.CASH_DRAWER_OPEN,
        entity_type=ENTITY_CASH_DRAWER,
        entity_id=drawer.id,
        metadata={"opening_amount": amount},
    )
    await db.flush()

    logger.info(
        f"Cash drawer {drawer.id} opened by {employee_id} "
        f"with {format_money(amount, settings.CURRENCY_SYMBOL)}"
    )
    return drawer


async def add_cash_drop(
    db: AsyncSession,
    drawer_id: UUID,
    employee_id: UUID,
    amount: Any,
    reason: Optional[str],
) -> CashDrop:
    """Record cash removed from an open drawer."""
    parsed = parse_amount(amount, "Amount", allow_zero=False)
    reason = _clean_text(reason, "Reason", "MISSING_REASON")
    drawer = await get_open_cash_drawer_or_raise(db, drawer_id)

    cash_drop = CashDrop(
        drawer_id=drawer.id,
        amount=parsed,
        reason=reason,
        dropped_by=employee_id,
        dropped_at=utc_now(),
    )
    drawer.cash_drops.append(cash_drop)
    await db.flush()

    record_audit(
        db,
        actor_employee_id=employee_id,
        action=AuditAction.CASH_DROP_CREATE,
        entity_type="cash_drop",
        entity_id=cash_drop.id,
        metadata={"drawer_id": drawer.id, "amount": parsed, "reason": reason},
    )
    await db.flush()

    logger.info(f"Cash drop of {format_money(parsed, settings.CURRENCY_SYMBOL)} from drawer {drawer.id}: {reason}")
    return cash_drop


async def add_cash_pickup(
    db: AsyncSession,
    drawer_id: UUID,
    employee_id: UUID,
    amount: Any,
    reason: Optional[str],
) -> CashPickup:
    """Record cash added to an open drawer (change float top-up)."""
    parsed = parse_amount(amount, "Amount", allow_zero=False)
    reason = _clean_text(reason, "Reason", "MISSING_REASON")
    drawer = await get_open_cash_drawer_or_raise(db, drawer_id)

    cash_pickup = CashPickup(
        drawer_id=drawer.id,
        amount=parsed,
        reason=reason,
        picked_up_by=employee_id,
        picked_up_at=utc_now(),
    )
    drawer.cash_pickups.append(cash_pickup)
    await db.flush()

    record_audit(
        db,
        actor_employee_id=employee_id,
        action=AuditAction.CASH_PICKUP_CREATE,
        entity_type="cash_pickup",
        entity_id=cash_pickup.id,
        metadata={"drawer_id": drawer.id, "amount": parsed, "reason": reason},
    )
    await db.flush()

    logger.info(f"Cash pickup of {format_money(parsed, settings.CURRENCY_SYMBOL)} into drawer {drawer.id}: {reason}")
    return cash_pickup


async def add_shift_note(
    db: AsyncSession,
    drawer_id: UUID,
    employee_id: UUID,
    note: Optional[str],
) -> ShiftNote:
    """Attach a free-text note to an open drawer."""
    text = _clean_text(note, "Note", "MISSING_NOTE")
    drawer = await get_open_cash_drawer_or_raise(db, drawer_id)

    shift_note = ShiftNote(
        drawer_id=drawer.id,
        note=text,
        created_by=employee_id,
        created_at=utc_now(),
    )
    drawer.shift_notes.append(shift_note)
    await db.flush()

    record_audit(
        db,
        actor_employee_id=employee_id,
        action=AuditAction.SHIFT_NOTE_CREATE,
        entity_type="shift_note",
        entity_id=shift_note.id,
        metadata={"drawer_id": drawer.id},
    )
    await db.flush()
    return shift_note


async def record_denomination_breakdown(
    db: AsyncSession,
    drawer_id: UUID,
    employee_id: UUID,
    counts: Optional[Mapping[Any, Any]],
) -> tuple[Dict[str, int], Decimal]:
    """
    Save a draft denomination count on an open drawer.

    The draft is used at close time when the close request carries no
    breakdown of its own.
    """
    normalized = normalize_denomination_counts(counts)
    drawer = await get_open_cash_drawer_or_raise(db, drawer_id)

    total = denomination_total(normalized)
    drawer.denomination_breakdown = normalized
    record_audit(
        db,
        actor_employee_id=employee_id,
        action=AuditAction.CASH_DRAWER_DENOMINATIONS,
        entity_type=ENTITY_CASH_DRAWER,
        entity_id=drawer.id,
        metadata={"counts": normalized, "total": total},
    )
    await db.flush()
    return normalized, total


async def attach_transaction(
    db: AsyncSession,
    drawer_id: UUID,
    transaction_id: UUID,
    employee_id: UUID,
) -> CashDrawer:
    """Attribute a sale to an open drawer. Attaching the same sale twice is a no-op."""
    drawer = await get_open_cash_drawer_or_raise(db, drawer_id)

    result = await db.execute(select(Transaction).where(Transaction.id == transaction_id))
    transaction = result.scalar_one_or_none()
    if not transaction:
        raise NotFoundError("Transaction not found", code="TRANSACTION_NOT_FOUND")

    if transaction_id in drawer.transaction_ids:
        return drawer

    result = await db.execute(
        select(CashDrawerTransaction).where(CashDrawerTransaction.transaction_id == transaction_id)
    )
    if result.scalars().first():
        raise ValidationError(
            "Transaction is already attributed to another cash drawer",
            code="TRANSACTION_ALREADY_ATTRIBUTED",
        )

    drawer.transaction_links.append(
        CashDrawerTransaction(
            drawer_id=drawer.id,
            transaction_id=transaction.id,
            transaction=transaction,
            attached_at=utc_now(),
        )
    )
    record_audit(
        db,
        actor_employee_id=employee_id,
        action=AuditAction.CASH_DRAWER_ADD_TRANSACTION,
        entity_type=ENTITY_CASH_DRAWER,
        entity_id=drawer.id,
        metadata={"transaction_id": transaction.id},
    )
    await db.flush()
    return drawer


async def close_cash_drawer(
    db: AsyncSession,
    drawer_id: UUID,
    employee_id: UUID,
    closing_amount: Any,
    expected_amount: Any = None,
    denomination_breakdown: Optional[Mapping[Any, Any]] = None,
) -> CashDrawer:
    """
    Finalize a shift.

    expected_amount is the pre-movement figure (opening float plus cash sales).
    It is computed from the attributed sales when not supplied. The stored
    difference is always measured against expected_amount + net cash movement.
    A denomination count that disagrees with the closing amount is logged and
    kept, never rejected.
    """
    closing = parse_amount(closing_amount, "Closing amount")
    expected_override = parse_amount(expected_amount, "Expected amount", required=False)
    counts = None
    if denomination_breakdown is not None:
        counts = normalize_denomination_counts(denomination_breakdown)

    drawer = await get_cash_drawer(db, drawer_id)
    if not drawer:
        raise NotFoundError("Cash drawer not found", code="CASH_DRAWER_NOT_FOUND")
    if not drawer.is_open:
        raise ValidationError("Cash drawer is already closed", code="CASH_DRAWER_ALREADY_CLOSED")

    if counts is None and drawer.denomination_breakdown:
        counts = dict(drawer.denomination_breakdown)

    if expected_override is not None:
        expected = expected_override
    else:
        expected = calculate_expected_amount(drawer.opening_amount, drawer.transactions)
    net_cash_movement = calculate_net_cash_movement(drawer.cash_drops, drawer.cash_pickups)
    total_expected_cash = calculate_total_expected_cash(expected, net_cash_movement)
    difference = calculate_variance(closing, total_expected_cash)

    counted_total = denomination_total(counts) if counts else None

    drawer.closing_amount = closing
    drawer.expected_amount = expected
    drawer.net_cash_movement = net_cash_movement
    drawer.difference = difference
    drawer.denomination_breakdown = counts
    drawer.denomination_total = counted_total
    drawer.closed_at = utc_now()
    drawer.active_employee_id = None

    mismatch = drawer.denomination_mismatch
    if mismatch:
        logger.warning(
            f"Drawer {drawer.id} denomination count {format_money(counted_total, settings.CURRENCY_SYMBOL)} "
            f"does not match closing amount {format_money(closing, settings.CURRENCY_SYMBOL)}"
        )

    record_audit(
        db,
        actor_employee_id=employee_id,
        action=AuditAction.CASH_DRAWER_CLOSE,
        entity_type=ENTITY_CASH_DRAWER,
        entity_id=drawer.id,
        metadata={
            "closing_amount": closing,
            "expected_amount": expected,
            "expected_amount_supplied": expected_override is not None,
            "net_cash_movement": net_cash_movement,
            "total_expected_cash": total_expected_cash,
            "difference": difference,
            "denomination_total": counted_total,
            "denomination_mismatch": mismatch,
        },
    )
    await db.flush()

    level = logging.WARNING if difference < 0 else logging.INFO
    logger.log(
        level,
        f"Cash drawer {drawer.id} closed by {employee_id}: counted "
        f"{format_money(closing, settings.CURRENCY_SYMBOL)}, expected "
        f"{format_money(total_expected_cash, settings.CURRENCY_SYMBOL)}, variance "
        f"{format_money(difference, settings.CURRENCY_SYMBOL)}",
    )
    return drawer
