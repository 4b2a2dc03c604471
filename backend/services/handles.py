from dataclasses import dataclass, field

from sqlalchemy.orm import Session, sessionmaker

from backend.repositories.booking_repository import BookingRepository
from backend.repositories.user_repository import UserRepository
from backend.services.audit import AuditRecorder
from backend.services.booking_service import BookingService
from backend.services.locks import InstructorLocks
from backend.services.notifications import LogNotifier


@dataclass
class ServiceHandles:
    """Process-wide collaborators, created once at startup and shared by requests and jobs."""

    session_factory: sessionmaker
    audit: AuditRecorder
    notifier: LogNotifier = field(default_factory=LogNotifier)
    instructor_locks: InstructorLocks = field(default_factory=InstructorLocks)

    def booking_service(self, db: Session) -> BookingService:
        return BookingService(
            repository=BookingRepository(db),
            users=UserRepository(db),
            audit=self.audit,
            notifier=self.notifier,
            instructor_locks=self.instructor_locks,
        )


def build_handles(session_factory: sessionmaker) -> ServiceHandles:
    return ServiceHandles(session_factory=session_factory, audit=AuditRecorder(session_factory))
