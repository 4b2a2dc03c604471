"""Booking lifecycle: creation, approval/assignment, completion and cancellation.

Each transition looks the booking up inside the caller's tenant, checks the
transition table, checks the caller's capability, and writes the new status
conditioned on the status it read. Any transition that attaches an
instructor runs the conflict check and the write while holding that
instructor's lock.
"""

import logging
import math
from collections.abc import Callable
from datetime import datetime

from backend.auth.dependencies import Identity
from backend.core import config
from backend.core.errors import ConflictError, NotFoundError, StateError, ValidationError
from backend.core.timeutils import to_naive_utc, utcnow
from backend.models.booking import Booking, BookingStatus
from backend.models.user import Role
from backend.repositories.booking_repository import BookingRepository
from backend.repositories.user_repository import UserRepository
from backend.services.audit import AuditRecorder
from backend.services.booking_state import can_transition, is_terminal
from backend.services.conflicts import has_conflict
from backend.services.locks import InstructorLocks
from backend.services.notifications import LogNotifier
from backend.services.permissions import BookingAction, ensure_action_allowed

logger = logging.getLogger(__name__)

RESOURCE_TYPE = 'booking'


class BookingService:
    def __init__(
        self,
        repository: BookingRepository,
        users: UserRepository,
        audit: AuditRecorder,
        notifier: LogNotifier,
        instructor_locks: InstructorLocks,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.users = users
        self.audit = audit
        self.notifier = notifier
        self.instructor_locks = instructor_locks
        self.clock = clock

    def detect_conflict(
        self,
        instructor_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: str | None = None,
    ) -> bool:
        return has_conflict(self.repository, instructor_id, start_time, end_time, exclude_booking_id)

    def list_bookings(
        self,
        actor: Identity,
        *,
        status: BookingStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        page: int = 1,
        limit: int = config.DEFAULT_PAGE_SIZE,
    ) -> dict:
        page = max(1, page or 1)
        limit = min(config.MAX_PAGE_SIZE, max(1, limit or config.DEFAULT_PAGE_SIZE))

        # Students see their own bookings, instructors the ones assigned to them.
        student_id = actor.user_id if actor.is_student else None
        instructor_id = actor.user_id if actor.is_instructor else None

        bookings, total = self.repository.list_for_tenant(
            actor.tenant_id,
            student_id=student_id,
            instructor_id=instructor_id,
            status=status,
            start_from=to_naive_utc(start_date) if start_date else None,
            start_to=to_naive_utc(end_date) if end_date else None,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return {
            'data': bookings,
            'meta': {
                'page': page,
                'limit': limit,
                'total': total,
                'total_pages': math.ceil(total / limit) if total else 0,
            },
        }

    def get_booking(self, booking_id: str, actor: Identity) -> Booking:
        booking = self._get_in_tenant(booking_id, actor.tenant_id)
        ensure_action_allowed(BookingAction.VIEW, actor, booking)
        return booking

    def create(
        self,
        title: str,
        start_time: datetime,
        end_time: datetime,
        student_id: str,
        tenant_id: str,
        instructor_id: str | None = None,
        notes: str | None = None,
        correlation_id: str | None = None,
    ) -> Booking:
        start_time = to_naive_utc(start_time)
        end_time = to_naive_utc(end_time)

        if end_time <= start_time:
            raise ValidationError('End time must be after start time.')
        if start_time < self.clock():
            raise ValidationError('Cannot book in the past.')

        if instructor_id:
            self._require_instructor(instructor_id, tenant_id)

        with self.instructor_locks.hold(instructor_id):
            if instructor_id and self.detect_conflict(instructor_id, start_time, end_time):
                raise ConflictError('Instructor has a conflicting booking at this time.')

            booking = self.repository.create(
                Booking(
                    title=title,
                    start_time=start_time,
                    end_time=end_time,
                    student_id=student_id,
                    instructor_id=instructor_id,
                    tenant_id=tenant_id,
                    notes=notes,
                    status=BookingStatus.REQUESTED.value,
                )
            )

        logger.info('Booking %s requested by %s', booking.id, student_id)
        self.audit.record(
            tenant_id,
            student_id,
            'BOOKING_CREATED',
            RESOURCE_TYPE,
            booking.id,
            after={
                'status': booking.status,
                'start_time': start_time.isoformat(),
                'end_time': end_time.isoformat(),
                'instructor_id': instructor_id,
            },
            correlation_id=correlation_id,
        )
        self.notifier.emit('BOOKING_REQUESTED', booking)
        return booking

    def approve(
        self,
        booking_id: str,
        instructor_id: str | None,
        actor: Identity,
        correlation_id: str | None = None,
    ) -> Booking:
        booking = self._get_in_tenant(booking_id, actor.tenant_id)
        self._ensure_transition(booking, BookingStatus.APPROVED, 'approve')
        ensure_action_allowed(BookingAction.APPROVE, actor, booking)

        if instructor_id:
            self._require_instructor(instructor_id, actor.tenant_id)

        effective_instructor_id = instructor_id or booking.instructor_id
        new_status = BookingStatus.ASSIGNED if effective_instructor_id else BookingStatus.APPROVED
        before = {'status': booking.status, 'instructor_id': booking.instructor_id}

        with self.instructor_locks.hold(effective_instructor_id):
            if effective_instructor_id and self.detect_conflict(
                effective_instructor_id,
                booking.start_time,
                booking.end_time,
                exclude_booking_id=booking.id,
            ):
                raise ConflictError('Instructor has a conflicting booking.')

            updated = self.repository.update(
                booking.id,
                {'status': new_status.value, 'instructor_id': effective_instructor_id},
                expected={'status': BookingStatus.REQUESTED.value},
            )

        if updated is None:
            raise StateError('Booking changed while it was being approved.')

        logger.info('Booking %s %s by %s', updated.id, updated.status.lower(), actor.user_id)
        self.audit.record(
            actor.tenant_id,
            actor.user_id,
            'BOOKING_APPROVED',
            RESOURCE_TYPE,
            updated.id,
            before=before,
            after={'status': updated.status, 'instructor_id': updated.instructor_id},
            correlation_id=correlation_id,
        )
        self.notifier.emit('BOOKING_APPROVED', updated)
        return updated

    def complete(self, booking_id: str, actor: Identity, correlation_id: str | None = None) -> Booking:
        booking = self._get_in_tenant(booking_id, actor.tenant_id)
        self._ensure_transition(booking, BookingStatus.COMPLETED, 'complete')
        ensure_action_allowed(BookingAction.COMPLETE, actor, booking)

        previous_status = booking.status
        updated = self.repository.update(
            booking.id,
            {'status': BookingStatus.COMPLETED.value},
            expected={'status': previous_status},
        )
        if updated is None:
            raise StateError('Booking changed while it was being completed.')

        self.audit.record(
            actor.tenant_id,
            actor.user_id,
            'BOOKING_COMPLETED',
            RESOURCE_TYPE,
            updated.id,
            before={'status': previous_status},
            after={'status': updated.status},
            correlation_id=correlation_id,
        )
        return updated

    def cancel(self, booking_id: str, actor: Identity, correlation_id: str | None = None) -> Booking:
        booking = self._get_in_tenant(booking_id, actor.tenant_id)
        self._ensure_transition(booking, BookingStatus.CANCELLED, 'cancel')
        ensure_action_allowed(BookingAction.CANCEL, actor, booking)

        previous_status = booking.status
        updated = self.repository.update(
            booking.id,
            {'status': BookingStatus.CANCELLED.value},
            expected={'status': previous_status},
        )
        if updated is None:
            raise StateError('Booking changed while it was being cancelled.')

        logger.info('Booking %s cancelled by %s (%s)', updated.id, actor.user_id, actor.role)
        self.audit.record(
            actor.tenant_id,
            actor.user_id,
            'BOOKING_CANCELLED',
            RESOURCE_TYPE,
            updated.id,
            before={'status': previous_status},
            after={'status': updated.status},
            correlation_id=correlation_id,
        )
        self.notifier.emit('BOOKING_CANCELLED', updated)
        return updated

    def _get_in_tenant(self, booking_id: str, tenant_id: str) -> Booking:
        booking = self.repository.find_by_id(booking_id, tenant_id)
        if booking is None:
            raise NotFoundError('Booking')
        return booking

    def _require_instructor(self, instructor_id: str, tenant_id: str) -> None:
        if self.users.find_in_tenant(instructor_id, tenant_id, role=Role.INSTRUCTOR) is None:
            raise NotFoundError('Instructor')

    @staticmethod
    def _ensure_transition(booking: Booking, target: BookingStatus, verb: str) -> None:
        if is_terminal(booking.status):
            raise StateError(
                f'Booking is already {booking.status.lower()}.',
                details={'status': booking.status},
            )
        if not can_transition(booking.status, target.value):
            raise StateError(
                f'Cannot {verb} booking in status: {booking.status}',
                details={'status': booking.status},
            )
