from datetime import datetime
from types import SimpleNamespace

from backend.services.notifications import LogNotifier

START = datetime(2030, 5, 1, 9, 0)


def _booking(instructor=None):
    student = SimpleNamespace(id='student-1', first_name='Ada', last_name='Lovelace', email='ada@example.edu')
    return SimpleNamespace(id='booking-1', student=student, instructor=instructor, start_time=START)


class _DetachedBooking:
    id = 'booking-2'
    start_time = START

    @property
    def student(self):
        raise RuntimeError('instance is not bound to a session')


def test_emit_logs_event_at_info(caplog) -> None:
    caplog.set_level('INFO', logger='backend.services.notifications')
    instructor = SimpleNamespace(id='instructor-1', first_name='Chuck', last_name='Yeager', email='cy@example.edu')

    LogNotifier().emit('BOOKING_APPROVED', _booking(instructor))

    record = caplog.records[-1]
    assert record.levelname == 'INFO'
    assert record.getMessage() == (
        '[EMAIL STUB] Event: BOOKING_APPROVED | Booking: booking-1 | Student: Ada Lovelace | '
        'Instructor: Chuck Yeager | Time: 2030-05-01T09:00:00'
    )


def test_escalation_alert_has_its_own_prefix(caplog) -> None:
    caplog.set_level('INFO', logger='backend.services.notifications')

    LogNotifier().emit('BOOKING_ESCALATED', _booking(), tenant='North Flight School', hours_elapsed=2.5)

    record = caplog.records[-1]
    assert record.levelname == 'WARNING'
    assert record.getMessage().startswith('[EMAIL STUB - ESCALATION] Event: BOOKING_ESCALATED | Booking: booking-1')
    assert record.getMessage().endswith('hours_elapsed: 2.5 | tenant: North Flight School')
    assert 'Instructor: unassigned' in record.getMessage()


def test_emit_never_raises_when_booking_cannot_be_read(caplog) -> None:
    LogNotifier().emit('BOOKING_REQUESTED', _DetachedBooking())

    assert 'Failed to emit BOOKING_REQUESTED notification' in caplog.text
