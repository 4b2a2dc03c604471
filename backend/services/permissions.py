import enum

from backend.auth.dependencies import Identity
from backend.core.errors import ForbiddenError
from backend.models.booking import Booking


class BookingAction(str, enum.Enum):
    VIEW = "view"
    APPROVE = "approve"
    COMPLETE = "complete"
    CANCEL = "cancel"


def is_action_allowed(action: BookingAction, identity: Identity, booking: Booking) -> bool:
    """Single place deciding whether ``identity`` may act on ``booking``."""
    if identity.tenant_id != booking.tenant_id:
        return False
    if identity.is_admin:
        return True

    is_owner = booking.student_id == identity.user_id
    is_assigned = booking.instructor_id is not None and booking.instructor_id == identity.user_id

    if action == BookingAction.VIEW:
        return (identity.is_student and is_owner) or (identity.is_instructor and is_assigned)
    if action == BookingAction.COMPLETE:
        return identity.is_instructor
    if action == BookingAction.CANCEL:
        return identity.is_instructor or (identity.is_student and is_owner)
    return False


def ensure_action_allowed(action: BookingAction, identity: Identity, booking: Booking) -> None:
    if not is_action_allowed(action, identity, booking):
        raise ForbiddenError()
