from pydantic import Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID
from decimal import Decimal

from tillkeeper.models.display_event import DisplayEventKind
from tillkeeper.models.transaction import PaymentMethod, OrderType
from tillkeeper.schemas.common import CamelModel


class DisplayLineItem(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)
    line_total: Optional[Decimal] = Field(None, ge=0)
    modifiers: List[str] = []


class PendingOrderPayload(CamelModel):
    """What the customer sees while the cashier reviews the ticket."""
    order_id: str = Field(..., min_length=1)
    items: List[DisplayLineItem] = Field(..., min_length=1)
    subtotal: Decimal = Field(..., ge=0)
    tax: Decimal = Field(Decimal("0"), ge=0)
    service_charge: Decimal = Field(Decimal("0"), ge=0)
    discount_total: Decimal = Field(Decimal("0"), ge=0)
    total_amount: Decimal = Field(..., ge=0)
    order_type: Optional[OrderType] = None
    customer_name: Optional[str] = None


class PendingPaymentPayload(CamelModel):
    """A payment awaiting the customer, e.g. a QR code for a mobile wallet."""
    order_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod
    redirect_url: Optional[str] = None
    reference: Optional[str] = None


class DisplayEventCreate(CamelModel):
    terminal_id: str = Field(..., min_length=1, max_length=100)
    kind: DisplayEventKind
    payload: Optional[Dict[str, Any]] = None
    ttl_seconds: Optional[int] = Field(None, ge=1, le=3600)


class DisplayEventResponse(CamelModel):
    id: UUID
    terminal_id: str
    kind: DisplayEventKind
    payload: Dict[str, Any] = {}
    created_at: datetime
    expires_at: datetime
    acknowledged_at: Optional[datetime] = None


class CurrentDisplayResponse(CamelModel):
    terminal_id: str
    pending_order: Optional[DisplayEventResponse] = None
    pending_payment: Optional[DisplayEventResponse] = None
