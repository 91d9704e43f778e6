"""
Customer Display Endpoints

The order-entry terminal publishes; the customer display polls and acknowledges.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from tillkeeper.core.database import get_db
from tillkeeper.core.dependencies import get_current_employee
from tillkeeper.core.error_handling import handle_endpoint_errors
from tillkeeper.models.display_event import DisplayEvent, DisplayEventKind
from tillkeeper.models.employee import Employee
from tillkeeper.schemas.display import DisplayEventCreate, DisplayEventResponse, CurrentDisplayResponse
from tillkeeper.services.display_channel_service import publish_event, get_current_events, acknowledge_event
from tillkeeper.services.timezone_service import ensure_utc

router = APIRouter()


def build_event_response(event: DisplayEvent) -> DisplayEventResponse:
    return DisplayEventResponse(
        id=event.id,
        terminal_id=event.terminal_id,
        kind=event.kind,
        payload=event.payload or {},
        created_at=ensure_utc(event.created_at),
        expires_at=ensure_utc(event.expires_at),
        acknowledged_at=ensure_utc(event.acknowledged_at),
    )


@router.post("/events", response_model=DisplayEventResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="publish_display_event")
async def publish_display_event(
    data: DisplayEventCreate,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    event = await publish_event(
        db,
        terminal_id=data.terminal_id,
        kind=data.kind,
        payload=data.payload,
        ttl_seconds=data.ttl_seconds,
    )
    await db.commit()
    return build_event_response(event)


@router.get("/terminals/{terminal_id}/current", response_model=CurrentDisplayResponse)
@handle_endpoint_errors(operation_name="get_current_display")
async def get_current_display(
    terminal_id: str,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    """Latest live pending order and pending payment for a terminal."""
    events = {e.kind: e for e in await get_current_events(db, terminal_id)}
    pending_order = events.get(DisplayEventKind.PENDING_ORDER)
    pending_payment = events.get(DisplayEventKind.PENDING_PAYMENT)
    return CurrentDisplayResponse(
        terminal_id=terminal_id,
        pending_order=build_event_response(pending_order) if pending_order else None,
        pending_payment=build_event_response(pending_payment) if pending_payment else None,
    )


@router.post("/events/{event_id}/ack", response_model=DisplayEventResponse)
@handle_endpoint_errors(operation_name="acknowledge_display_event")
async def acknowledge_display_event(
    event_id: UUID,
    current_employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
):
    event = await acknowledge_event(db, event_id)
    await db.commit()
    return build_event_response(event)
