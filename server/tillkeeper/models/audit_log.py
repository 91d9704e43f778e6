from sqlalchemy import Column, String, ForeignKey, DateTime, JSON, Index, Uuid
from sqlalchemy.orm import relationship
import uuid
from tillkeeper.core.database import Base
from tillkeeper.services.timezone_service import utc_now


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    actor_employee_id = Column(Uuid, ForeignKey("employees.id"), nullable=False)
    action = Column(String(100), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Uuid, nullable=True)
    metadata_json = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    actor = relationship("Employee", foreign_keys=[actor_employee_id])

    __table_args__ = (
        Index("idx_audit_logs_created", "created_at"),
        Index("idx_audit_logs_actor", "actor_employee_id"),
        Index("idx_audit_logs_entity", "entity_type", "entity_id"),
    )
