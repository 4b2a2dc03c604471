"""Instructor availability model definitions."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from backend.core.timeutils import utcnow
from backend.database import Base


class InstructorAvailability(Base):
    """A declared free window. Informational only; bookings are not checked against it."""
    __tablename__ = "instructor_availability"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey("tenants.id"), index=True, nullable=False)
    instructor_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
