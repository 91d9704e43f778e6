from sqlalchemy import Column, ForeignKey, DateTime, Index, Numeric, Text, JSON, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
from decimal import Decimal
from tillkeeper.core.database import Base
from tillkeeper.services.timezone_service import utc_now


class CashDrawer(Base):
    __tablename__ = "cash_drawers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id = Column(Uuid, ForeignKey("employees.id"), nullable=False, index=True)

    # Equals employee_id while the drawer is open and NULL once closed.
    # The unique constraint makes the database reject a second open drawer.
    active_employee_id = Column(Uuid, nullable=True, unique=True)

    opening_amount = Column(Numeric(12, 2), nullable=False)
    opened_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Set once on close
    closing_amount = Column(Numeric(12, 2), nullable=True)
    expected_amount = Column(Numeric(12, 2), nullable=True)  # opening + cash sales
    net_cash_movement = Column(Numeric(12, 2), nullable=True)  # pickups - drops
    difference = Column(Numeric(12, 2), nullable=True)  # closing - (expected + net movement)
    denomination_breakdown = Column(JSON, nullable=True)  # {"1000": 2, "0.25": 4, ...}
    denomination_total = Column(Numeric(12, 2), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    employee = relationship("Employee", back_populates="cash_drawers", foreign_keys=[employee_id])
    cash_drops = relationship("CashDrop", back_populates="cash_drawer", order_by="CashDrop.dropped_at")
    cash_pickups = relationship("CashPickup", back_populates="cash_drawer", order_by="CashPickup.picked_up_at")
    shift_notes = relationship("ShiftNote", back_populates="cash_drawer", order_by="ShiftNote.created_at")
    transaction_links = relationship(
        "CashDrawerTransaction",
        back_populates="cash_drawer",
        order_by="CashDrawerTransaction.attached_at",
    )

    __table_args__ = (
        Index("idx_cash_drawers_employee_opened", "employee_id", "opened_at"),
        Index("idx_cash_drawers_closed", "closed_at"),
    )

    @property
    def is_open(self) -> bool:
        return self.closed_at is None

    @property
    def denomination_mismatch(self) -> bool:
        """True when a non-empty denomination count disagrees with the closing amount."""
        if self.closing_amount is None or self.denomination_total is None:
            return False
        if not any((self.denomination_breakdown or {}).values()):
            return False
        return Decimal(str(self.denomination_total)) != Decimal(str(self.closing_amount))

    @property
    def transactions(self) -> list:
        return [link.transaction for link in self.transaction_links]

    @property
    def transaction_ids(self) -> list:
        return [link.transaction_id for link in self.transaction_links]


class CashDrop(Base):
    """Cash removed from the drawer mid-shift (bank deposit, safe transfer)."""
    __tablename__ = "cash_drops"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    drawer_id = Column(Uuid, ForeignKey("cash_drawers.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    reason = Column(Text, nullable=False)
    dropped_by = Column(Uuid, ForeignKey("employees.id"), nullable=False)
    dropped_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    cash_drawer = relationship("CashDrawer", back_populates="cash_drops")


class CashPickup(Base):
    """Cash added to the drawer mid-shift (change float top-up)."""
    __tablename__ = "cash_pickups"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    drawer_id = Column(Uuid, ForeignKey("cash_drawers.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    reason = Column(Text, nullable=False)
    picked_up_by = Column(Uuid, ForeignKey("employees.id"), nullable=False)
    picked_up_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    cash_drawer = relationship("CashDrawer", back_populates="cash_pickups")


class ShiftNote(Base):
    __tablename__ = "shift_notes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    drawer_id = Column(Uuid, ForeignKey("cash_drawers.id"), nullable=False, index=True)
    note = Column(Text, nullable=False)
    created_by = Column(Uuid, ForeignKey("employees.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    cash_drawer = relationship("CashDrawer", back_populates="shift_notes")


class CashDrawerTransaction(Base):
    """Attribution of a sale to the drawer whose shift rang it up."""
    __tablename__ = "cash_drawer_transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    drawer_id = Column(Uuid, ForeignKey("cash_drawers.id"), nullable=False, index=True)
    transaction_id = Column(Uuid, ForeignKey("transactions.id"), nullable=False)
    attached_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    cash_drawer = relationship("CashDrawer", back_populates="transaction_links")
    transaction = relationship("Transaction")

    __table_args__ = (
        UniqueConstraint("drawer_id", "transaction_id", name="uq_cash_drawer_transaction"),
    )
