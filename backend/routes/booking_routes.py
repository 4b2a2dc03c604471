from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import Identity, get_current_identity, require_roles
from backend.core import config
from backend.core.request_context import get_correlation_id
from backend.models.booking import BookingStatus
from backend.models.user import Role
from backend.routes.dependencies import database_unavailable, get_booking_service
from backend.routes.schemas import PageMeta
from backend.services.booking_service import BookingService

router = APIRouter(tags=['bookings'])

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 200
MAX_BOOKING_NOTES_LENGTH = 500


class CreateBookingRequest(BaseModel):
    title: str
    start_time: datetime
    end_time: datetime
    instructor_id: str | None = None
    notes: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not MIN_TITLE_LENGTH <= len(normalized) <= MAX_TITLE_LENGTH:
            raise ValueError(f'Title must be between {MIN_TITLE_LENGTH} and {MAX_TITLE_LENGTH} characters.')
        return normalized

    @field_validator('instructor_id')
    @classmethod
    def validate_instructor_id(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_BOOKING_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_BOOKING_NOTES_LENGTH} characters or fewer.')

        return normalized


class ApproveBookingRequest(BaseModel):
    instructor_id: str | None = None


class BookingResponse(BaseModel):
    id: str
    tenant_id: str
    title: str
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    student_id: str
    instructor_id: str | None = None
    notes: str | None = None
    created_at: datetime
    escalated_at: datetime | None = None

    class Config:
        from_attributes = True


class BookingListResponse(BaseModel):
    data: list[BookingResponse]
    meta: PageMeta


@router.get('', response_model=BookingListResponse)
def list_bookings(
    status_filter: BookingStatus | None = Query(default=None, alias='status'),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1),
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
):
    try:
        return service.list_bookings(
            identity,
            status=status_filter,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{booking_id}', response_model=BookingResponse)
def get_booking(
    booking_id: str,
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
):
    try:
        return service.get_booking(booking_id, identity)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest,
    identity: Identity = Depends(require_roles(Role.STUDENT)),
    service: BookingService = Depends(get_booking_service),
):
    try:
        return service.create(
            title=data.title,
            start_time=data.start_time,
            end_time=data.end_time,
            student_id=identity.user_id,
            tenant_id=identity.tenant_id,
            instructor_id=data.instructor_id,
            notes=data.notes,
            correlation_id=get_correlation_id(),
        )
    except SQLAlchemyError as exc:
        service.repository.db.rollback()
        raise database_unavailable() from exc


@router.post('/{booking_id}/approve', response_model=BookingResponse)
def approve_booking(
    booking_id: str,
    data: ApproveBookingRequest | None = None,
    identity: Identity = Depends(require_roles(Role.ADMIN)),
    service: BookingService = Depends(get_booking_service),
):
    instructor_id = data.instructor_id if data else None
    try:
        return service.approve(booking_id, instructor_id, identity, correlation_id=get_correlation_id())
    except SQLAlchemyError as exc:
        service.repository.db.rollback()
        raise database_unavailable() from exc


@router.post('/{booking_id}/complete', response_model=BookingResponse)
def complete_booking(
    booking_id: str,
    identity: Identity = Depends(require_roles(Role.INSTRUCTOR, Role.ADMIN)),
    service: BookingService = Depends(get_booking_service),
):
    try:
        return service.complete(booking_id, identity, correlation_id=get_correlation_id())
    except SQLAlchemyError as exc:
        service.repository.db.rollback()
        raise database_unavailable() from exc


@router.post('/{booking_id}/cancel', response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
):
    try:
        return service.cancel(booking_id, identity, correlation_id=get_correlation_id())
    except SQLAlchemyError as exc:
        service.repository.db.rollback()
        raise database_unavailable() from exc
