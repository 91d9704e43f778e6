from typing import Optional, List
from datetime import datetime
from uuid import UUID
from decimal import Decimal

from tillkeeper.schemas.common import CamelModel


class ShiftStats(CamelModel):
    total_sales: Decimal
    cash_sales: Decimal
    card_sales: Decimal
    mobile_sales: Decimal
    total_tips: Decimal
    order_count: int


class ShiftSummaryResponse(ShiftStats):
    drawer_id: UUID
    employee_id: UUID
    employee_name: str
    opened_at: datetime
    closed_at: datetime
    duration_minutes: int
    opening_amount: Decimal
    closing_amount: Decimal
    expected_amount: Decimal
    net_cash_movement: Decimal
    difference: Decimal
    denomination_mismatch: bool
    cash_drop_count: int
    cash_pickup_count: int
    note_count: int


class ShiftTotals(CamelModel):
    total_shifts: int
    total_sales: Decimal
    total_cash: Decimal
    total_card: Decimal
    total_mobile: Decimal
    total_tips: Decimal
    total_orders: int
    total_difference: Decimal
    has_net_shortage: bool


class EmployeeShiftTotals(ShiftTotals):
    employee_id: UUID
    employee_name: str


class ShiftHistoryResponse(CamelModel):
    period: str
    range_start: Optional[datetime] = None
    range_end: Optional[datetime] = None
    shifts: List[ShiftSummaryResponse] = []
    summary: ShiftTotals
    employee_totals: List[EmployeeShiftTotals] = []
