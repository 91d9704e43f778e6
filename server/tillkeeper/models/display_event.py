from sqlalchemy import Column, String, DateTime, Enum, JSON, Index, Uuid
import uuid
import enum
from tillkeeper.core.database import Base
from tillkeeper.services.timezone_service import utc_now


class DisplayEventKind(str, enum.Enum):
    PENDING_ORDER = "PENDING_ORDER"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    CLEAR = "CLEAR"


class DisplayEvent(Base):
    """A message from an order-entry terminal to its customer-facing display."""
    __tablename__ = "display_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    terminal_id = Column(String(100), nullable=False)
    kind = Column(Enum(DisplayEventKind, values_callable=lambda x: [e.value for e in x]), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    acknowledged_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_display_events_terminal_kind", "terminal_id", "kind", "created_at"),
    )
