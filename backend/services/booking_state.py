from backend.models.booking import BookingStatus

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    BookingStatus.REQUESTED.value: frozenset({
        BookingStatus.APPROVED.value,
        BookingStatus.ASSIGNED.value,
        BookingStatus.CANCELLED.value,
    }),
    BookingStatus.APPROVED.value: frozenset({BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value}),
    BookingStatus.ASSIGNED.value: frozenset({BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value}),
    BookingStatus.COMPLETED.value: frozenset(),
    BookingStatus.CANCELLED.value: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def is_terminal(status: str) -> bool:
    return not ALLOWED_TRANSITIONS.get(status)
