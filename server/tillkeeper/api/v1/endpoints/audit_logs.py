from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional
from uuid import UUID

from tillkeeper.core.database import get_db
from tillkeeper.core.dependencies import get_current_manager
from tillkeeper.core.error_handling import handle_endpoint_errors
from tillkeeper.core.exceptions import ValidationError
from tillkeeper.models.employee import Employee
from tillkeeper.schemas.audit_log import AuditLogListResponse, AuditLogResponse, Pagination
from tillkeeper.services.audit_service import list_audit_logs
from tillkeeper.services.timezone_service import ensure_utc, get_utc_range_for_date_range

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
@handle_endpoint_errors(operation_name="list_audit_logs")
async def list_audit_logs_endpoint(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    action: Optional[str] = Query(None),
    employee_id: Optional[UUID] = Query(None, alias="employeeId"),
    entity_type: Optional[str] = Query(None, alias="entityType"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_employee: Employee = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Audit trail of drawer mutations, newest first. Managers and admins only."""
    if start_date and end_date and start_date > end_date:
        raise ValidationError("Start date must be on or before end date", code="INVALID_DATE_RANGE")

    start = end = None
    if start_date:
        start, _ = get_utc_range_for_date_range(start_date, start_date)
    if end_date:
        _, end = get_utc_range_for_date_range(end_date, end_date)

    logs, total = await list_audit_logs(
        db,
        start=start,
        end=end,
        action=action,
        employee_id=employee_id,
        entity_type=entity_type,
        page=page,
        limit=limit,
    )

    return AuditLogListResponse(
        logs=[
            AuditLogResponse(
                id=log.id,
                actor_employee_id=log.actor_employee_id,
                action=log.action,
                entity_type=log.entity_type,
                entity_id=log.entity_id,
                metadata_json=log.metadata_json or {},
                created_at=ensure_utc(log.created_at),
            )
            for log in logs
        ],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=(total + limit - 1) // limit,
        ),
    )
