"""Tenant model definitions."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String

from backend.core.timeutils import utcnow
from backend.database import Base


class Tenant(Base):
    """Isolation boundary that owns users, bookings and audit history."""
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
