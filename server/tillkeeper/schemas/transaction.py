from pydantic import Field
from typing import Optional, List, Any
from datetime import datetime
from uuid import UUID
from decimal import Decimal

from tillkeeper.models.transaction import PaymentMethod, TransactionStatus, OrderType
from tillkeeper.schemas.common import CamelModel


class PaymentCreate(CamelModel):
    method: PaymentMethod
    amount: Any = None
    reference: Optional[str] = Field(None, max_length=255)


class TransactionCreate(CamelModel):
    total_amount: Any = None
    tip: Any = 0
    status: TransactionStatus = TransactionStatus.COMPLETED
    order_type: OrderType = OrderType.DINE_IN
    notes: Optional[str] = Field(None, max_length=2000)
    payments: List[PaymentCreate] = []
    drawer_id: Optional[UUID] = None


class PaymentResponse(CamelModel):
    id: UUID
    method: PaymentMethod
    amount: Decimal
    reference: Optional[str] = None


class TransactionResponse(CamelModel):
    id: UUID
    employee_id: UUID
    total_amount: Decimal
    tip: Decimal
    status: TransactionStatus
    order_type: OrderType
    notes: Optional[str] = None
    created_at: datetime
    payments: List[PaymentResponse] = []
    cash_amount: Decimal
