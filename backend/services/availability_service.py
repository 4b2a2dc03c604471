from datetime import datetime

from sqlalchemy.orm import Session

from backend.auth.dependencies import Identity
from backend.core.errors import ForbiddenError, NotFoundError, ValidationError
from backend.core.timeutils import to_naive_utc, utcnow
from backend.models.availability import InstructorAvailability


class AvailabilityService:
    """Declared instructor free windows. Never consulted by the conflict detector."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_windows(self, tenant_id: str, instructor_id: str | None = None) -> list[InstructorAvailability]:
        query = self.db.query(InstructorAvailability).filter(
            InstructorAvailability.tenant_id == tenant_id,
            InstructorAvailability.end_time >= utcnow(),
        )
        if instructor_id:
            query = query.filter(InstructorAvailability.instructor_id == instructor_id)
        return query.order_by(InstructorAvailability.start_time.asc()).all()

    def create_window(
        self,
        actor: Identity,
        start_time: datetime,
        end_time: datetime,
        is_recurring: bool = False,
    ) -> InstructorAvailability:
        start_time = to_naive_utc(start_time)
        end_time = to_naive_utc(end_time)
        if end_time <= start_time:
            raise ValidationError('End time must be after start time.')

        window = InstructorAvailability(
            tenant_id=actor.tenant_id,
            instructor_id=actor.user_id,
            start_time=start_time,
            end_time=end_time,
            is_recurring=is_recurring,
        )
        self.db.add(window)
        self.db.commit()
        self.db.refresh(window)
        return window

    def delete_window(self, window_id: str, actor: Identity) -> None:
        window = self.db.query(InstructorAvailability).filter(
            InstructorAvailability.id == window_id,
            InstructorAvailability.tenant_id == actor.tenant_id,
        ).first()
        if window is None:
            raise NotFoundError('Availability slot')
        if not actor.is_admin and window.instructor_id != actor.user_id:
            raise ForbiddenError('Only the instructor who declared this window can remove it.')

        self.db.delete(window)
        self.db.commit()
