"""
Audit Service

Writes and lists audit trail entries for drawer mutations.
"""
from typing import Optional, Dict, List, Any
from uuid import UUID
from datetime import datetime
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from tillkeeper.models.audit_log import AuditLog


class AuditAction:
    CASH_DRAWER_OPEN = "CASH_DRAWER_OPEN"
    CASH_DRAWER_CLOSE = "CASH_DRAWER_CLOSE"
    CASH_DROP_CREATE = "CASH_DROP_CREATE"
    CASH_PICKUP_CREATE = "CASH_PICKUP_CREATE"
    SHIFT_NOTE_CREATE = "SHIFT_NOTE_CREATE"
    CASH_DRAWER_ADD_TRANSACTION = "CASH_DRAWER_ADD_TRANSACTION"
    CASH_DRAWER_DENOMINATIONS = "CASH_DRAWER_DENOMINATIONS"


def _json_safe(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def record_audit(
    db: AsyncSession,
    actor_employee_id: UUID,
    action: str,
    entity_type: str,
    entity_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Add an audit entry to the current unit of work; the caller flushes or commits."""
    audit_log = AuditLog(
        actor_employee_id=actor_employee_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata_json=_json_safe(metadata or {}),
    )
    db.add(audit_log)
    return audit_log


async def list_audit_logs(
    db: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    action: Optional[str] = None,
    employee_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[List[AuditLog], int]:
    """Get audit logs with filters, newest first."""
    query = select(AuditLog)

    if start:
        query = query.where(AuditLog.created_at >= start)
    if end:
        query = query.where(AuditLog.created_at <= end)
    if action:
        query = query.where(AuditLog.action == action)
    if employee_id:
        query = query.where(AuditLog.actor_employee_id == employee_id)
    if entity_type:
        query = query.where(AuditLog.entity_type == entity_type)

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = query.order_by(AuditLog.created_at.desc()).limit(limit).offset((page - 1) * limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total
