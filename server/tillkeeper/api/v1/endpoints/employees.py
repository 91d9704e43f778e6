from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tillkeeper.api.v1.endpoints.auth import build_employee_response
from tillkeeper.core.database import get_db
from tillkeeper.core.dependencies import get_current_employee
from tillkeeper.core.error_handling import handle_endpoint_errors
from tillkeeper.models.employee import Employee, EmployeeStatus
from tillkeeper.schemas.auth import EmployeeResponse

router = APIRouter()


@router.get("", response_model=list[EmployeeResponse])
@handle_endpoint_errors(operation_name="list_employees")
async def list_employees(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """Employees for the shift history filter, sorted by name."""
    query = select(Employee).order_by(Employee.name)
    if not include_inactive:
        query = query.where(Employee.status == EmployeeStatus.ACTIVE)
    result = await db.execute(query)
    return [build_employee_response(e) for e in result.scalars().all()]
