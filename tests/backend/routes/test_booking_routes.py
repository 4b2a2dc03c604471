from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from backend.core.errors import ConflictError, ForbiddenError, StateError
from backend.routes.booking_routes import (
    ApproveBookingRequest,
    BookingListResponse,
    BookingResponse,
    CreateBookingRequest,
    approve_booking,
    cancel_booking,
    complete_booking,
    create_booking,
    get_booking,
    list_bookings,
)


def test_create_booking_request_normalizes_fields() -> None:
    request = CreateBookingRequest(
        title='  Night currency  ',
        start_time=datetime(2099, 1, 5, 9, 0),
        end_time=datetime(2099, 1, 5, 10, 0),
        instructor_id='   ',
        notes='  ',
    )

    assert request.title == 'Night currency'
    assert request.instructor_id is None
    assert request.notes is None


@pytest.mark.parametrize(
    ('overrides', 'message'),
    [
        ({'title': 'ab'}, 'Title must be between 3 and 200 characters.'),
        ({'title': 'x' * 201}, 'Title must be between 3 and 200 characters.'),
        ({'notes': 'n' * 501}, 'Notes must be 500 characters or fewer.'),
    ],
)
def test_create_booking_request_rejects_invalid_fields(overrides: dict, message: str) -> None:
    values = {
        'title': 'Night currency',
        'start_time': datetime(2099, 1, 5, 9, 0),
        'end_time': datetime(2099, 1, 5, 10, 0),
    }
    values.update(overrides)

    with pytest.raises(ValidationError) as exception_info:
        CreateBookingRequest(**values)

    assert message in str(exception_info.value)


def _create_request(start: datetime, end: datetime, instructor_id: str | None = None) -> CreateBookingRequest:
    return CreateBookingRequest(title='Solo cross-country', start_time=start, end_time=end, instructor_id=instructor_id)


def test_create_booking_uses_caller_identity(service, student, tomorrow) -> None:
    booking = create_booking(data=_create_request(tomorrow(9), tomorrow(11)), identity=student, service=service)
    response = BookingResponse.model_validate(booking)

    assert response.student_id == student.user_id
    assert response.tenant_id == student.tenant_id
    assert response.status == 'REQUESTED'


def test_create_booking_accepts_timezone_aware_times(service, student, tomorrow) -> None:
    start = tomorrow(9).replace(tzinfo=timezone.utc)

    booking = create_booking(
        data=_create_request(start, start + timedelta(hours=1)),
        identity=student,
        service=service,
    )

    assert booking.start_time == tomorrow(9)


def test_create_booking_propagates_conflict(service, student, other_student, tomorrow) -> None:
    create_booking(data=_create_request(tomorrow(9), tomorrow(11), 'instructor-1'), identity=student, service=service)

    with pytest.raises(ConflictError) as exception_info:
        create_booking(
            data=_create_request(tomorrow(10), tomorrow(12), 'instructor-1'),
            identity=other_student,
            service=service,
        )

    assert exception_info.value.code == 'CONFLICT'


def test_full_lifecycle_through_routes(service, student, admin, instructor, tomorrow) -> None:
    booking = create_booking(data=_create_request(tomorrow(9), tomorrow(11)), identity=student, service=service)

    assigned = approve_booking(
        booking_id=booking.id,
        data=ApproveBookingRequest(instructor_id='instructor-1'),
        identity=admin,
        service=service,
    )
    assert assigned.status == 'ASSIGNED'

    completed = complete_booking(booking_id=booking.id, identity=instructor, service=service)
    assert completed.status == 'COMPLETED'

    with pytest.raises(StateError) as exception_info:
        cancel_booking(booking_id=booking.id, identity=student, service=service)
    assert exception_info.value.code == 'INVALID_STATE'


def test_approve_booking_without_body_keeps_booking_unassigned(service, student, admin, tomorrow) -> None:
    booking = create_booking(data=_create_request(tomorrow(9), tomorrow(11)), identity=student, service=service)

    approved = approve_booking(booking_id=booking.id, data=None, identity=admin, service=service)

    assert approved.status == 'APPROVED'
    assert approved.instructor_id is None


def test_get_booking_hides_other_students_bookings(service, student, other_student, tomorrow) -> None:
    booking = create_booking(data=_create_request(tomorrow(9), tomorrow(11)), identity=student, service=service)

    with pytest.raises(ForbiddenError):
        get_booking(booking_id=booking.id, identity=other_student, service=service)


def test_list_bookings_returns_page_meta(service, student, tomorrow) -> None:
    create_booking(data=_create_request(tomorrow(9), tomorrow(10)), identity=student, service=service)
    create_booking(data=_create_request(tomorrow(13), tomorrow(14)), identity=student, service=service)

    result = list_bookings(
        status_filter=None,
        start_date=tomorrow(12),
        end_date=None,
        page=1,
        limit=20,
        identity=student,
        service=service,
    )
    response = BookingListResponse.model_validate(result, from_attributes=True)

    assert [booking.start_time for booking in response.data] == [tomorrow(13)]
    assert response.meta.total == 1
    assert response.meta.total_pages == 1
