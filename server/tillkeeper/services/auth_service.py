from typing import Optional
from uuid import UUID
import logging
from datetime import timedelta
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from tillkeeper.core.config import settings
from tillkeeper.core.security import verify_pin, create_access_token, validate_pin_format
from tillkeeper.models.employee import Employee, EmployeeStatus

logger = logging.getLogger(__name__)


async def get_employee(db: AsyncSession, employee_id: UUID) -> Optional[Employee]:
    result = await db.execute(select(Employee).where(Employee.id == employee_id))
    return result.scalar_one_or_none()


async def pin_login(db: AsyncSession, employee_id: UUID, pin: str) -> tuple[Employee, str]:
    """Authenticate an employee by PIN and issue an access token."""
    is_valid, error_message = validate_pin_format(pin)
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_message,
        )

    employee = await get_employee(db, employee_id)

    if not employee or not employee.pin_hash or not verify_pin(pin, employee.pin_hash):
        logger.warning(f"Failed PIN login for employee {employee_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid employee or PIN",
        )

    if employee.status != EmployeeStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Employee account is inactive",
        )

    access_token = create_access_token(
        data={"sub": str(employee.id), "role": employee.role.value},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    logger.info(f"Employee {employee.id} logged in")
    return employee, access_token
