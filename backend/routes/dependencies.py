from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from backend.database import get_db
from backend.services.booking_service import BookingService
from backend.services.handles import ServiceHandles

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def get_handles(request: Request) -> ServiceHandles:
    return request.app.state.handles


def get_booking_service(
    db: Session = Depends(get_db),
    handles: ServiceHandles = Depends(get_handles),
) -> BookingService:
    return handles.booking_service(db)


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )
