"""Booking model definitions."""

import enum
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from backend.core.timeutils import utcnow
from backend.database import Base
from backend.models.tenant import Tenant
from backend.models.user import User


class BookingStatus(str, enum.Enum):
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    ASSIGNED = "ASSIGNED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


ACTIVE_STATUSES = (
    BookingStatus.REQUESTED.value,
    BookingStatus.APPROVED.value,
    BookingStatus.ASSIGNED.value,
)


class Booking(Base):
    """A student's request for instructor time."""
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_bookings_time_range"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey("tenants.id"), index=True, nullable=False)
    student_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    instructor_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=True)
    title = Column(String, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String, default=BookingStatus.REQUESTED.value, nullable=False)
    notes = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    escalated_at = Column(DateTime, nullable=True)

    student = relationship(User, foreign_keys=[student_id], lazy="joined")
    instructor = relationship(User, foreign_keys=[instructor_id], lazy="joined")
    tenant = relationship(Tenant, lazy="joined")
