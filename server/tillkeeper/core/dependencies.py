from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tillkeeper.core.database import get_db
from tillkeeper.core.security import decode_token
from tillkeeper.models.employee import Employee, EmployeeRole, EmployeeStatus

security = HTTPBearer()


async def get_current_employee(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """Get current authenticated employee from JWT token."""
    token = credentials.credentials

    # Validate token format before decoding
    if not token or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials: token is empty",
        )

    payload = decode_token(token)

    if payload is None or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )

    employee_id = payload.get("sub")
    if employee_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        employee_uuid = UUID(employee_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    result = await db.execute(select(Employee).where(Employee.id == employee_uuid))
    employee = result.scalar_one_or_none()

    if employee is None or employee.status != EmployeeStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Employee not found or inactive",
        )

    return employee


def require_role(allowed_roles: list[EmployeeRole]):
    """Dependency factory for role-based access control."""
    async def role_checker(
        current_employee: Employee = Depends(get_current_employee),
    ) -> Employee:
        if current_employee.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_employee
    return role_checker


MANAGER_ROLES = [EmployeeRole.MANAGER, EmployeeRole.ADMIN]

get_current_manager = require_role(MANAGER_ROLES)


def is_manager(employee: Employee) -> bool:
    return employee.role in MANAGER_ROLES


def ensure_drawer_access(drawer, employee: Employee) -> None:
    """Cashiers may only act on their own drawer; managers and admins on any."""
    if drawer.employee_id != employee.id and not is_manager(employee):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own cash drawer",
        )
