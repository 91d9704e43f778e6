from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID

from tillkeeper.schemas.common import CamelModel


class AuditLogResponse(CamelModel):
    id: UUID
    actor_employee_id: UUID
    action: str
    entity_type: str
    entity_id: Optional[UUID] = None
    metadata_json: Dict[str, Any] = {}
    created_at: datetime


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AuditLogListResponse(CamelModel):
    logs: List[AuditLogResponse] = []
    pagination: Pagination
