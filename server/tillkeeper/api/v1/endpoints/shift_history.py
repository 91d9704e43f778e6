from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional
from uuid import UUID

from tillkeeper.core.database import get_db
from tillkeeper.core.dependencies import get_current_employee, is_manager
from tillkeeper.core.error_handling import handle_endpoint_errors
from tillkeeper.models.employee import Employee
from tillkeeper.schemas.shift_history import ShiftHistoryResponse
from tillkeeper.services.shift_history_service import ShiftPeriod, ShiftSort, get_shift_history

router = APIRouter()


@router.get("", response_model=ShiftHistoryResponse)
@handle_endpoint_errors(operation_name="get_shift_history")
async def get_shift_history_endpoint(
    period: ShiftPeriod = Query(ShiftPeriod.ALL),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    employee_id: Optional[UUID] = Query(None, alias="employeeId"),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: ShiftSort = Query(ShiftSort.DATE, alias="sortBy"),
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """
    Closed shifts with per-shift sales, variance and totals.

    Cashiers only see their own shifts; managers may filter by employee.
    """
    if not is_manager(current_employee):
        employee_id = current_employee.id

    history = await get_shift_history(
        db,
        period=period,
        start_date=start_date,
        end_date=end_date,
        employee_id=employee_id,
        search=search,
        sort_by=sort_by,
    )
    return ShiftHistoryResponse(**history)
