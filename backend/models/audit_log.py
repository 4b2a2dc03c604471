"""Audit log model definitions."""

import uuid

from sqlalchemy import JSON, Column, DateTime, String

from backend.core.timeutils import utcnow
from backend.database import Base


class AuditLog(Base):
    """Append-only record of a state change."""
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), index=True, nullable=False)
    user_id = Column(String(36), index=True, nullable=True)
    action = Column(String(80), index=True, nullable=False)  # e.g. BOOKING_APPROVED
    resource = Column(String(40), nullable=False)
    resource_id = Column(String(36), nullable=True)
    before = Column(JSON, nullable=True)
    after = Column(JSON, nullable=True)
    correlation_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True, nullable=False)
