import logging

from backend.models.booking import Booking

logger = logging.getLogger(__name__)

ESCALATION_EVENT = 'BOOKING_ESCALATED'


def _display_name(user) -> str:
    if user is None:
        return 'unassigned'
    full_name = ' '.join(part for part in (user.first_name, user.last_name) if part)
    return full_name or user.email or user.id


class LogNotifier:
    """Email stand-in: every notification becomes a log line."""

    def emit(self, event: str, booking: Booking, **extra) -> None:
        try:
            prefix = '[EMAIL STUB - ESCALATION]' if event == ESCALATION_EVENT else '[EMAIL STUB]'
            message = (
                f'{prefix} Event: {event} | Booking: {booking.id} | '
                f'Student: {_display_name(booking.student)} | '
                f'Instructor: {_display_name(booking.instructor)} | '
                f'Time: {booking.start_time.isoformat()}'
            )
            if extra:
                message += ' | ' + ' | '.join(f'{key}: {value}' for key, value in sorted(extra.items()))
            if event == ESCALATION_EVENT:
                logger.warning(message)
            else:
                logger.info(message)
        except Exception:
            logger.exception('Failed to emit %s notification', event)
