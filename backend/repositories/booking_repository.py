from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from backend.core.timeutils import utcnow
from backend.models.booking import ACTIVE_STATUSES, Booking, BookingStatus


class BookingRepository:
    """Data access for bookings. Every read outside the scheduler is tenant scoped."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, booking_id: str, tenant_id: str) -> Booking | None:
        return self.db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.tenant_id == tenant_id,
        ).first()

    def find_active_by_instructor_overlapping(
        self,
        instructor_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_id: str | None = None,
    ) -> list[Booking]:
        query = self.db.query(Booking).filter(
            Booking.instructor_id == instructor_id,
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        return query.all()

    def find_stale_unescalated(self, status: BookingStatus, cutoff: datetime) -> list[Booking]:
        return self.db.query(Booking).filter(
            Booking.status == status.value,
            Booking.instructor_id.is_(None),
            Booking.created_at <= cutoff,
            Booking.escalated_at.is_(None),
        ).order_by(Booking.created_at.asc()).all()

    def list_for_tenant(
        self,
        tenant_id: str,
        *,
        student_id: str | None = None,
        instructor_id: str | None = None,
        status: BookingStatus | None = None,
        start_from: datetime | None = None,
        start_to: datetime | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Booking], int]:
        filters = [Booking.tenant_id == tenant_id]
        if student_id is not None:
            filters.append(Booking.student_id == student_id)
        if instructor_id is not None:
            filters.append(Booking.instructor_id == instructor_id)
        if status is not None:
            filters.append(Booking.status == status.value)
        if start_from is not None:
            filters.append(Booking.start_time >= start_from)
        if start_to is not None:
            filters.append(Booking.start_time <= start_to)

        total = self.db.execute(select(func.count(Booking.id)).where(*filters)).scalar_one()
        bookings = (
            self.db.query(Booking)
            .filter(*filters)
            .order_by(Booking.start_time.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return bookings, total

    def create(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    def update(self, booking_id: str, fields: dict, expected: dict | None = None) -> Booking | None:
        """Apply ``fields`` if the row still matches ``expected``.

        Returns the refreshed booking, or None when the row no longer
        matches (it changed underneath the caller).
        """
        statement = update(Booking).where(Booking.id == booking_id)
        for column_name, value in (expected or {}).items():
            column = getattr(Booking, column_name)
            statement = statement.where(column.is_(None) if value is None else column == value)
        statement = statement.values(**fields, updated_at=utcnow()).execution_options(
            synchronize_session=False
        )

        result = self.db.execute(statement)
        if result.rowcount == 0:
            self.db.rollback()
            return None

        self.db.commit()
        return self.db.get(Booking, booking_id, populate_existing=True)

    def mark_escalated(self, booking_id: str, escalated_at: datetime) -> Booking | None:
        return self.update(
            booking_id,
            {'escalated_at': escalated_at},
            expected={
                'status': BookingStatus.REQUESTED.value,
                'instructor_id': None,
                'escalated_at': None,
            },
        )
