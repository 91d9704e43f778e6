from pydantic import Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID
from decimal import Decimal

from tillkeeper.schemas.common import CamelModel


# Amounts are typed Any so that strings, numbers and junk all reach the
# service's money parser, which reports them as validation errors.

class CashDrawerOpen(CamelModel):
    opening_amount: Any = None


class CashDrawerClose(CamelModel):
    closing_amount: Any = None
    expected_amount: Any = Field(None, description="Opening float plus cash sales; computed when omitted")
    denomination_breakdown: Optional[Dict[str, Any]] = None


class CashMovementCreate(CamelModel):
    amount: Any = None
    reason: Optional[str] = Field(None, max_length=500)


class ShiftNoteCreate(CamelModel):
    note: Optional[str] = Field(None, max_length=2000)


class DenominationBreakdownUpdate(CamelModel):
    counts: Dict[str, Any] = Field(default_factory=dict)


class DenominationBreakdownResponse(CamelModel):
    drawer_id: UUID
    counts: Dict[str, int]
    total: Decimal


class AttachTransactionRequest(CamelModel):
    transaction_id: UUID


class CashDropResponse(CamelModel):
    id: UUID
    drawer_id: UUID
    amount: Decimal
    reason: str
    dropped_by: UUID
    dropped_at: datetime


class CashPickupResponse(CamelModel):
    id: UUID
    drawer_id: UUID
    amount: Decimal
    reason: str
    picked_up_by: UUID
    picked_up_at: datetime


class ShiftNoteResponse(CamelModel):
    id: UUID
    drawer_id: UUID
    note: str
    created_by: UUID
    created_at: datetime


class CashDrawerResponse(CamelModel):
    id: UUID
    employee_id: UUID
    employee_name: str
    opening_amount: Decimal
    opened_at: datetime
    closing_amount: Optional[Decimal] = None
    expected_amount: Optional[Decimal] = None
    net_cash_movement: Optional[Decimal] = None
    difference: Optional[Decimal] = None
    denomination_breakdown: Optional[Dict[str, int]] = None
    denomination_total: Optional[Decimal] = None
    denomination_mismatch: bool = False
    closed_at: Optional[datetime] = None
    is_open: bool
    transactions: List[UUID] = []
    cash_drops: List[CashDropResponse] = []
    cash_pickups: List[CashPickupResponse] = []
    shift_notes: List[ShiftNoteResponse] = []


class ReconciliationResponse(CamelModel):
    drawer_id: UUID
    is_open: bool
    opening_amount: Decimal
    cash_sales: Decimal
    expected_amount: Decimal
    total_drops: Decimal
    total_pickups: Decimal
    net_cash_movement: Decimal
    total_expected_cash: Decimal
    closing_amount: Optional[Decimal] = None
    variance: Optional[Decimal] = None
    denomination_breakdown: Dict[str, int] = {}
    denomination_total: Decimal
    transaction_count: int
