"""Instructor double-booking detection.

Intervals are half-open: ``[start, end)``. Two bookings that only touch at
a boundary (09:00-11:00 and 11:00-13:00) do not conflict.
"""

from collections.abc import Iterable
from datetime import datetime

from backend.models.booking import ACTIVE_STATUSES, Booking
from backend.repositories.booking_repository import BookingRepository


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and end_a > start_b


def conflicting_bookings(
    bookings: Iterable[Booking],
    instructor_id: str,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: str | None = None,
) -> list[Booking]:
    return [
        booking
        for booking in bookings
        if booking.instructor_id == instructor_id
        and booking.status in ACTIVE_STATUSES
        and booking.id != exclude_booking_id
        and intervals_overlap(start_time, end_time, booking.start_time, booking.end_time)
    ]


def has_conflict(
    repository: BookingRepository,
    instructor_id: str,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: str | None = None,
) -> bool:
    candidates = repository.find_active_by_instructor_overlapping(
        instructor_id,
        start_time,
        end_time,
        exclude_id=exclude_booking_id,
    )
    return bool(conflicting_bookings(candidates, instructor_id, start_time, end_time, exclude_booking_id))
