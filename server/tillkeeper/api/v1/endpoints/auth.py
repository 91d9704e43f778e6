from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tillkeeper.core.database import get_db
from tillkeeper.core.dependencies import get_current_employee
from tillkeeper.core.error_handling import handle_endpoint_errors
from tillkeeper.models.employee import Employee
from tillkeeper.schemas.auth import PinLoginRequest, TokenResponse, EmployeeResponse
from tillkeeper.services.auth_service import pin_login

router = APIRouter()


def build_employee_response(employee: Employee) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        name=employee.name,
        role=employee.role,
        status=employee.status,
        created_at=employee.created_at,
    )


@router.post("/pin-login", response_model=TokenResponse)
@handle_endpoint_errors(operation_name="pin_login")
async def pin_login_endpoint(
    data: PinLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Log in at the register with employee ID and PIN."""
    employee, access_token = await pin_login(db, data.employee_id, data.pin)
    return TokenResponse(access_token=access_token, employee=build_employee_response(employee))


@router.get("/me", response_model=EmployeeResponse)
@handle_endpoint_errors(operation_name="get_me")
async def get_me(current_employee: Employee = Depends(get_current_employee)):
    return build_employee_response(current_employee)
