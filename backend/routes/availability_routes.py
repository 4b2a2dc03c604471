from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import Identity, get_current_identity, require_roles
from backend.database import get_db
from backend.models.user import Role
from backend.routes.dependencies import database_unavailable
from backend.services.availability_service import AvailabilityService

router = APIRouter(tags=['availability'])


class CreateAvailabilityRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    is_recurring: bool = False

    @model_validator(mode='after')
    def validate_time_range(self) -> 'CreateAvailabilityRequest':
        if self.end_time <= self.start_time:
            raise ValueError('End time must be after start time.')
        return self


class AvailabilityResponse(BaseModel):
    id: str
    instructor_id: str
    start_time: datetime
    end_time: datetime
    is_recurring: bool

    class Config:
        from_attributes = True


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


@router.get('', response_model=list[AvailabilityResponse])
def list_availability(
    instructor_id: str | None = Query(default=None),
    identity: Identity = Depends(get_current_identity),
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        return service.list_windows(identity.tenant_id, instructor_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=AvailabilityResponse, status_code=status.HTTP_201_CREATED)
def create_availability(
    data: CreateAvailabilityRequest,
    identity: Identity = Depends(require_roles(Role.INSTRUCTOR, Role.ADMIN)),
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        return service.create_window(identity, data.start_time, data.end_time, data.is_recurring)
    except SQLAlchemyError as exc:
        service.db.rollback()
        raise database_unavailable() from exc


@router.delete('/{window_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_availability(
    window_id: str,
    identity: Identity = Depends(require_roles(Role.INSTRUCTOR, Role.ADMIN)),
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        service.delete_window(window_id, identity)
    except SQLAlchemyError as exc:
        service.db.rollback()
        raise database_unavailable() from exc
