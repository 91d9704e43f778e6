from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from tillkeeper.core.database import get_db
from tillkeeper.core.dependencies import get_current_employee, ensure_drawer_access, is_manager
from tillkeeper.core.error_handling import handle_endpoint_errors
from tillkeeper.core.exceptions import NotFoundError
from tillkeeper.models.employee import Employee
from tillkeeper.models.transaction import Transaction
from tillkeeper.schemas.transaction import TransactionCreate, TransactionResponse, PaymentResponse
from tillkeeper.services.cash_drawer_service import get_cash_drawer
from tillkeeper.services.reconciliation_service import cash_leg
from tillkeeper.services.timezone_service import ensure_utc
from tillkeeper.services.transaction_service import create_transaction, get_transaction

router = APIRouter()


def build_transaction_response(transaction: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=transaction.id,
        employee_id=transaction.employee_id,
        total_amount=transaction.total_amount,
        tip=transaction.tip,
        status=transaction.status,
        order_type=transaction.order_type,
        notes=transaction.notes,
        created_at=ensure_utc(transaction.created_at),
        payments=[
            PaymentResponse(id=p.id, method=p.method, amount=p.amount, reference=p.reference)
            for p in transaction.payments
        ],
        cash_amount=cash_leg(transaction),
    )


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_transaction")
async def create_transaction_endpoint(
    data: TransactionCreate,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """Record a sale and attribute it to the given drawer or the caller's open drawer."""
    if data.drawer_id is not None:
        drawer = await get_cash_drawer(db, data.drawer_id)
        if not drawer:
            raise NotFoundError("Cash drawer not found", code="CASH_DRAWER_NOT_FOUND")
        ensure_drawer_access(drawer, current_employee)

    transaction = await create_transaction(
        db,
        employee_id=current_employee.id,
        total_amount=data.total_amount,
        payments=[p.model_dump() for p in data.payments],
        tip=data.tip,
        status=data.status,
        order_type=data.order_type,
        notes=data.notes,
        drawer_id=data.drawer_id,
    )
    await db.commit()
    return build_transaction_response(transaction)


@router.get("/{transaction_id}", response_model=TransactionResponse)
@handle_endpoint_errors(operation_name="get_transaction")
async def get_transaction_endpoint(
    transaction_id: UUID,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    transaction = await get_transaction(db, transaction_id)
    if not transaction:
        raise NotFoundError("Transaction not found", code="TRANSACTION_NOT_FOUND")
    if transaction.employee_id != current_employee.id and not is_manager(current_employee):
        raise NotFoundError("Transaction not found", code="TRANSACTION_NOT_FOUND")
    return build_transaction_response(transaction)
