"""
Cash Drawer Endpoints

Open, move cash, count and close a cashier's drawer.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID

from tillkeeper.core.database import get_db
from tillkeeper.core.dependencies import get_current_employee, ensure_drawer_access, is_manager
from tillkeeper.core.error_handling import handle_endpoint_errors
from tillkeeper.core.exceptions import NotFoundError
from tillkeeper.core.money import parse_amount
from tillkeeper.models.cash_drawer import CashDrawer, CashDrop, CashPickup, ShiftNote
from tillkeeper.models.employee import Employee
from tillkeeper.schemas.cash_drawer import (
    CashDrawerOpen,
    CashDrawerClose,
    CashMovementCreate,
    ShiftNoteCreate,
    DenominationBreakdownUpdate,
    DenominationBreakdownResponse,
    AttachTransactionRequest,
    CashDrawerResponse,
    CashDropResponse,
    CashPickupResponse,
    ShiftNoteResponse,
    ReconciliationResponse,
)
from tillkeeper.services.cash_drawer_service import (
    get_cash_drawer,
    get_active_cash_drawer,
    list_cash_drawers,
    open_cash_drawer,
    close_cash_drawer,
    add_cash_drop,
    add_cash_pickup,
    add_shift_note,
    record_denomination_breakdown,
    attach_transaction,
)
from tillkeeper.services.reconciliation_service import build_reconciliation
from tillkeeper.services.timezone_service import ensure_utc

router = APIRouter()


def build_drop_response(cash_drop: CashDrop) -> CashDropResponse:
    return CashDropResponse(
        id=cash_drop.id,
        drawer_id=cash_drop.drawer_id,
        amount=cash_drop.amount,
        reason=cash_drop.reason,
        dropped_by=cash_drop.dropped_by,
        dropped_at=ensure_utc(cash_drop.dropped_at),
    )


def build_pickup_response(cash_pickup: CashPickup) -> CashPickupResponse:
    return CashPickupResponse(
        id=cash_pickup.id,
        drawer_id=cash_pickup.drawer_id,
        amount=cash_pickup.amount,
        reason=cash_pickup.reason,
        picked_up_by=cash_pickup.picked_up_by,
        picked_up_at=ensure_utc(cash_pickup.picked_up_at),
    )


def build_note_response(shift_note: ShiftNote) -> ShiftNoteResponse:
    return ShiftNoteResponse(
        id=shift_note.id,
        drawer_id=shift_note.drawer_id,
        note=shift_note.note,
        created_by=shift_note.created_by,
        created_at=ensure_utc(shift_note.created_at),
    )


def build_cash_drawer_response(drawer: CashDrawer) -> CashDrawerResponse:
    return CashDrawerResponse(
        id=drawer.id,
        employee_id=drawer.employee_id,
        employee_name=drawer.employee.name if drawer.employee else "Unknown",
        opening_amount=drawer.opening_amount,
        opened_at=ensure_utc(drawer.opened_at),
        closing_amount=drawer.closing_amount,
        expected_amount=drawer.expected_amount,
        net_cash_movement=drawer.net_cash_movement,
        difference=drawer.difference,
        denomination_breakdown=drawer.denomination_breakdown,
        denomination_total=drawer.denomination_total,
        denomination_mismatch=drawer.denomination_mismatch,
        closed_at=ensure_utc(drawer.closed_at),
        is_open=drawer.is_open,
        transactions=drawer.transaction_ids,
        cash_drops=[build_drop_response(d) for d in drawer.cash_drops],
        cash_pickups=[build_pickup_response(p) for p in drawer.cash_pickups],
        shift_notes=[build_note_response(n) for n in drawer.shift_notes],
    )


async def load_drawer_for_employee(
    db: AsyncSession,
    drawer_id: UUID,
    employee: Employee,
) -> CashDrawer:
    drawer = await get_cash_drawer(db, drawer_id)
    if not drawer:
        raise NotFoundError("Cash drawer not found", code="CASH_DRAWER_NOT_FOUND")
    ensure_drawer_access(drawer, employee)
    return drawer


@router.get("", response_model=list[CashDrawerResponse])
@handle_endpoint_errors(operation_name="list_cash_drawers")
async def list_cash_drawers_endpoint(
    employee_id: Optional[UUID] = Query(None, alias="employeeId"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """List drawers with their drops, pickups and notes. Cashiers only see their own."""
    if not is_manager(current_employee):
        employee_id = current_employee.id

    drawers = await list_cash_drawers(db, employee_id=employee_id, limit=limit, offset=offset)
    return [build_cash_drawer_response(d) for d in drawers]


@router.get("/active", response_model=Optional[CashDrawerResponse])
@handle_endpoint_errors(operation_name="get_active_cash_drawer")
async def get_active_cash_drawer_endpoint(
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """The caller's open drawer, or null when none is open."""
    drawer = await get_active_cash_drawer(db, current_employee.id)
    if not drawer:
        return None
    return build_cash_drawer_response(drawer)


@router.get("/{drawer_id}", response_model=CashDrawerResponse)
@handle_endpoint_errors(operation_name="get_cash_drawer")
async def get_cash_drawer_endpoint(
    drawer_id: UUID,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    drawer = await load_drawer_for_employee(db, drawer_id, current_employee)
    return build_cash_drawer_response(drawer)


@router.post("", response_model=CashDrawerResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="open_cash_drawer")
async def open_cash_drawer_endpoint(
    data: CashDrawerOpen,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """Open a drawer for the caller with the counted opening float."""
    drawer = await open_cash_drawer(db, current_employee.id, data.opening_amount)
    await db.commit()

    drawer = await get_cash_drawer(db, drawer.id)
    return build_cash_drawer_response(drawer)


@router.post("/{drawer_id}/close", response_model=CashDrawerResponse)
@handle_endpoint_errors(operation_name="close_cash_drawer")
async def close_cash_drawer_endpoint(
    drawer_id: UUID,
    data: CashDrawerClose,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """Close the drawer with the counted amount and store the variance."""
    await load_drawer_for_employee(db, drawer_id, current_employee)
    drawer = await close_cash_drawer(
        db,
        drawer_id,
        current_employee.id,
        closing_amount=data.closing_amount,
        expected_amount=data.expected_amount,
        denomination_breakdown=data.denomination_breakdown,
    )
    await db.commit()

    drawer = await get_cash_drawer(db, drawer.id)
    return build_cash_drawer_response(drawer)


@router.post("/{drawer_id}/cash-drops", response_model=CashDropResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="add_cash_drop")
async def add_cash_drop_endpoint(
    drawer_id: UUID,
    data: CashMovementCreate,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    await load_drawer_for_employee(db, drawer_id, current_employee)
    cash_drop = await add_cash_drop(db, drawer_id, current_employee.id, data.amount, data.reason)
    await db.commit()
    return build_drop_response(cash_drop)


@router.post("/{drawer_id}/cash-pickups", response_model=CashPickupResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="add_cash_pickup")
async def add_cash_pickup_endpoint(
    drawer_id: UUID,
    data: CashMovementCreate,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    await load_drawer_for_employee(db, drawer_id, current_employee)
    cash_pickup = await add_cash_pickup(db, drawer_id, current_employee.id, data.amount, data.reason)
    await db.commit()
    return build_pickup_response(cash_pickup)


@router.post("/{drawer_id}/shift-notes", response_model=ShiftNoteResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="add_shift_note")
async def add_shift_note_endpoint(
    drawer_id: UUID,
    data: ShiftNoteCreate,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    await load_drawer_for_employee(db, drawer_id, current_employee)
    shift_note = await add_shift_note(db, drawer_id, current_employee.id, data.note)
    await db.commit()
    return build_note_response(shift_note)


@router.put("/{drawer_id}/denominations", response_model=DenominationBreakdownResponse)
@handle_endpoint_errors(operation_name="record_denomination_breakdown")
async def record_denomination_breakdown_endpoint(
    drawer_id: UUID,
    data: DenominationBreakdownUpdate,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """Save the bill and coin count in progress; close uses it when no count is sent."""
    await load_drawer_for_employee(db, drawer_id, current_employee)
    counts, total = await record_denomination_breakdown(db, drawer_id, current_employee.id, data.counts)
    await db.commit()
    return DenominationBreakdownResponse(drawer_id=drawer_id, counts=counts, total=total)


@router.post("/{drawer_id}/transactions", response_model=CashDrawerResponse)
@handle_endpoint_errors(operation_name="attach_transaction")
async def attach_transaction_endpoint(
    drawer_id: UUID,
    data: AttachTransactionRequest,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """Attribute an existing sale to the drawer."""
    await load_drawer_for_employee(db, drawer_id, current_employee)
    await attach_transaction(db, drawer_id, data.transaction_id, current_employee.id)
    await db.commit()

    drawer = await get_cash_drawer(db, drawer_id)
    return build_cash_drawer_response(drawer)


@router.get("/{drawer_id}/reconciliation", response_model=ReconciliationResponse)
@handle_endpoint_errors(operation_name="get_reconciliation")
async def get_reconciliation_endpoint(
    drawer_id: UUID,
    closing_amount: Optional[str] = Query(None, alias="closingAmount"),
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """Preview expected cash and variance for a counted amount without closing."""
    drawer = await load_drawer_for_employee(db, drawer_id, current_employee)
    closing = parse_amount(closing_amount, "Closing amount", required=False)
    return ReconciliationResponse(**build_reconciliation(drawer, closing))
