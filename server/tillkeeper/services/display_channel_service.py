"""
Customer Display Channel Service

Explicit messages from an order-entry terminal to its customer-facing
display. A terminal publishes the pending order or pending payment; the
display short-polls for the current events and acknowledges what it has
shown. Every event expires, so a crashed terminal never leaves a stale
order on screen.
"""
from typing import Optional, Dict, Any, List
from uuid import UUID
from datetime import datetime, timedelta
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, update

from tillkeeper.core.config import settings
from tillkeeper.core.exceptions import ValidationError, NotFoundError
from tillkeeper.models.display_event import DisplayEvent, DisplayEventKind
from tillkeeper.schemas.display import PendingOrderPayload, PendingPaymentPayload
from tillkeeper.services.timezone_service import utc_now, ensure_utc

logger = logging.getLogger(__name__)

PAYLOAD_SCHEMAS = {
    DisplayEventKind.PENDING_ORDER: PendingOrderPayload,
    DisplayEventKind.PENDING_PAYMENT: PendingPaymentPayload,
}

# Kinds a new event of the given kind replaces
SUPERSEDES = {
    DisplayEventKind.PENDING_ORDER: [DisplayEventKind.PENDING_ORDER],
    DisplayEventKind.PENDING_PAYMENT: [DisplayEventKind.PENDING_PAYMENT],
    DisplayEventKind.CLEAR: [DisplayEventKind.PENDING_ORDER, DisplayEventKind.PENDING_PAYMENT],
}


def validate_payload(kind: DisplayEventKind, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate a payload against its kind's schema and return it in JSON form."""
    schema = PAYLOAD_SCHEMAS.get(kind)
    if schema is None:
        return {}
    if not payload:
        raise ValidationError(f"Payload is required for {kind.value}", code="INVALID_DISPLAY_PAYLOAD")
    try:
        return schema.model_validate(payload).model_dump(mode="json", by_alias=True)
    except ValueError as e:
        raise ValidationError(f"Invalid {kind.value} payload: {e}", code="INVALID_DISPLAY_PAYLOAD")


def is_live(event: DisplayEvent, now: Optional[datetime] = None) -> bool:
    now = ensure_utc(now or utc_now())
    return event.acknowledged_at is None and ensure_utc(event.expires_at) > now


async def publish_event(
    db: AsyncSession,
    terminal_id: str,
    kind: DisplayEventKind,
    payload: Optional[Dict[str, Any]] = None,
    ttl_seconds: Optional[int] = None,
) -> DisplayEvent:
    """Publish an event, superseding earlier unacknowledged events it replaces."""
    terminal_id = (terminal_id or "").strip()
    if not terminal_id:
        raise ValidationError("Terminal ID is required", code="MISSING_TERMINAL_ID")

    kind = DisplayEventKind(kind)
    data = validate_payload(kind, payload)
    now = utc_now()
    ttl = ttl_seconds if ttl_seconds is not None else settings.DISPLAY_EVENT_TTL_SECONDS
    if ttl <= 0:
        raise ValidationError("Event lifetime must be positive", code="INVALID_TTL")

    await db.execute(
        update(DisplayEvent)
        .where(
            and_(
                DisplayEvent.terminal_id == terminal_id,
                DisplayEvent.kind.in_(SUPERSEDES[kind]),
                DisplayEvent.acknowledged_at.is_(None),
            )
        )
        .values(acknowledged_at=now)
        .execution_options(synchronize_session=False)
    )

    event = DisplayEvent(
        terminal_id=terminal_id,
        kind=kind,
        payload=data,
        created_at=now,
        expires_at=now + timedelta(seconds=ttl),
    )
    db.add(event)
    await db.flush()
    logger.debug(f"Display event {event.kind.value} published for terminal {terminal_id}")
    return event


async def get_current_events(
    db: AsyncSession,
    terminal_id: str,
    now: Optional[datetime] = None,
) -> List[DisplayEvent]:
    """Latest live event per kind for a terminal. CLEAR events are never returned."""
    now = now or utc_now()
    result = await db.execute(
        select(DisplayEvent)
        .where(
            and_(
                DisplayEvent.terminal_id == terminal_id,
                DisplayEvent.acknowledged_at.is_(None),
                DisplayEvent.kind != DisplayEventKind.CLEAR,
            )
        )
        .order_by(DisplayEvent.created_at.desc())
        .execution_options(populate_existing=True)
    )

    latest: Dict[DisplayEventKind, DisplayEvent] = {}
    for event in result.scalars().all():
        if event.kind in latest or not is_live(event, now):
            continue
        latest[event.kind] = event
    return list(latest.values())


async def acknowledge_event(db: AsyncSession, event_id: UUID) -> DisplayEvent:
    """Mark an event as consumed by the display."""
    result = await db.execute(select(DisplayEvent).where(DisplayEvent.id == event_id))
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError("Display event not found", code="DISPLAY_EVENT_NOT_FOUND")
    if event.acknowledged_at is not None:
        raise ValidationError("Display event was already acknowledged", code="DISPLAY_EVENT_ACKNOWLEDGED")

    event.acknowledged_at = utc_now()
    await db.flush()
    return event
