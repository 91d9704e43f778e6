from pydantic import Field
from typing import Optional
from datetime import datetime
from uuid import UUID

from tillkeeper.models.employee import EmployeeRole, EmployeeStatus
from tillkeeper.schemas.common import CamelModel


class PinLoginRequest(CamelModel):
    employee_id: UUID
    pin: str = Field(..., min_length=4, max_length=8)


class EmployeeResponse(CamelModel):
    id: UUID
    name: str
    role: EmployeeRole
    status: EmployeeStatus
    created_at: Optional[datetime] = None


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    employee: EmployeeResponse
