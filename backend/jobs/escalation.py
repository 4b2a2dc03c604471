"""Escalation of bookings that sit unassigned for too long.

A pass selects REQUESTED bookings with no instructor, created at or before
``now - escalation_hours`` and never escalated, and stamps ``escalated_at``
on each of them exactly once. The stamp is written only if the row still
matches that selection, so a booking approved or cancelled mid-pass is
skipped rather than overwritten.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.orm import sessionmaker

from backend.core import config
from backend.core.timeutils import utcnow
from backend.models.booking import Booking, BookingStatus
from backend.repositories.booking_repository import BookingRepository
from backend.services.audit import AuditRecorder
from backend.services.notifications import LogNotifier

logger = logging.getLogger(__name__)


class EscalationJob:
    def __init__(
        self,
        session_factory: sessionmaker,
        audit: AuditRecorder,
        notifier: LogNotifier,
        escalation_hours: int = config.ESCALATION_HOURS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session_factory = session_factory
        self.audit = audit
        self.notifier = notifier
        self.escalation_hours = escalation_hours
        self.clock = clock

    def run_once(self, now: datetime | None = None) -> int:
        """Run one pass and return how many bookings were escalated.

        Never raises: a failed pass is logged and the next tick retries.
        """
        try:
            return self._run(now or self.clock())
        except Exception:
            logger.exception('[EscalationJob] Error during escalation run')
            return 0

    def _run(self, now: datetime) -> int:
        cutoff = now - timedelta(hours=self.escalation_hours)
        db = self.session_factory()
        try:
            repository = BookingRepository(db)
            stale = repository.find_stale_unescalated(BookingStatus.REQUESTED, cutoff)
            if not stale:
                return 0

            logger.info('[EscalationJob] Found %d booking(s) to escalate', len(stale))
            escalated = 0
            for booking_id in [booking.id for booking in stale]:
                try:
                    if self._escalate(repository, booking_id, now):
                        escalated += 1
                except Exception:
                    db.rollback()
                    logger.exception('[EscalationJob] Failed to escalate booking %s', booking_id)
            return escalated
        finally:
            db.close()

    def _escalate(self, repository: BookingRepository, booking_id: str, now: datetime) -> bool:
        updated = repository.mark_escalated(booking_id, now)
        if updated is None:
            logger.info('[EscalationJob] Booking %s changed before escalation, skipping', booking_id)
            return False

        hours_elapsed = round((now - updated.created_at).total_seconds() / 3600, 1)
        self.notifier.emit(
            'BOOKING_ESCALATED',
            updated,
            tenant=_tenant_label(updated),
            hours_elapsed=hours_elapsed,
        )
        self.audit.record(
            updated.tenant_id,
            None,
            'BOOKING_ESCALATED',
            'booking',
            updated.id,
            before={'status': BookingStatus.REQUESTED.value, 'escalated_at': None},
            after={'escalated_at': now.isoformat()},
        )
        return True


def _tenant_label(booking: Booking) -> str:
    if booking.tenant is not None and booking.tenant.name:
        return booking.tenant.name
    return booking.tenant_id


class EscalationScheduler:
    """Runs an :class:`EscalationJob` immediately, then every ``interval_seconds``.

    The wait for the next tick starts only after the previous pass has
    finished, and ``run_pass`` refuses to start while another pass is in
    flight, so passes never overlap.
    """

    def __init__(self, job: EscalationJob, interval_seconds: float) -> None:
        self.job = job
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._pass_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        logger.info(
            '[EscalationJob] Scheduled: runs every %ss, escalates after %sh',
            self.interval_seconds,
            self.job.escalation_hours,
        )
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name='escalation-scheduler', daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 10.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_pass(self) -> int:
        if not self._pass_lock.acquire(blocking=False):
            logger.info('[EscalationJob] Previous pass still running, skipping this tick')
            return 0
        try:
            return self.job.run_once()
        finally:
            self._pass_lock.release()

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            self.run_pass()
            if self._stop_event.wait(self.interval_seconds):
                break
