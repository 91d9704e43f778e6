from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, Index, Numeric, Text, Uuid
from sqlalchemy.orm import relationship
import uuid
import enum
from tillkeeper.core.database import Base
from tillkeeper.services.timezone_service import utc_now


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    GCASH = "GCASH"
    PAYMAYA = "PAYMAYA"


CARD_METHODS = (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)
MOBILE_METHODS = (PaymentMethod.GCASH, PaymentMethod.PAYMAYA)


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY = "READY"
    SERVED = "SERVED"
    COMPLETED = "COMPLETED"
    VOIDED = "VOIDED"


class OrderType(str, enum.Enum):
    DINE_IN = "DINE_IN"
    TAKEOUT = "TAKEOUT"
    DELIVERY = "DELIVERY"


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id = Column(Uuid, ForeignKey("employees.id"), nullable=False, index=True)
    order_type = Column(Enum(OrderType, values_callable=lambda x: [e.value for e in x]), nullable=False, default=OrderType.DINE_IN)
    status = Column(Enum(TransactionStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=TransactionStatus.COMPLETED)
    total_amount = Column(Numeric(12, 2), nullable=False)
    tip = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    employee = relationship("Employee")
    payments = relationship(
        "Payment",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="Payment.created_at",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_transactions_created", "created_at"),
    )


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    transaction_id = Column(Uuid, ForeignKey("transactions.id"), nullable=False, index=True)
    method = Column(Enum(PaymentMethod, values_callable=lambda x: [e.value for e in x]), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    reference = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    transaction = relationship("Transaction", back_populates="payments")
