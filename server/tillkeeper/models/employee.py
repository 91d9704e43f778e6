from sqlalchemy import Column, String, Enum, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid
import enum
from tillkeeper.core.database import Base
from tillkeeper.services.timezone_service import utc_now


class EmployeeRole(str, enum.Enum):
    CASHIER = "CASHIER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class EmployeeStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    role = Column(Enum(EmployeeRole, values_callable=lambda x: [e.value for e in x]), nullable=False, default=EmployeeRole.CASHIER)
    pin_hash = Column(String(255), nullable=True)
    status = Column(Enum(EmployeeStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=EmployeeStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    cash_drawers = relationship("CashDrawer", back_populates="employee", foreign_keys="CashDrawer.employee_id")
