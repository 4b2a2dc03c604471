"""Typed application errors and their HTTP rendering.

Every error raised by the booking core carries a stable machine-readable
``code``. The request layer renders it without inspecting the core.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from backend.core.request_context import get_correlation_id

logger = logging.getLogger(__name__)


class AppError(Exception):
    code = 'INTERNAL_ERROR'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'An unexpected error occurred.'

    def __init__(self, message: str | None = None, details: dict | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    code = 'NOT_FOUND'
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = 'Resource', details: dict | None = None) -> None:
        super().__init__(f'{resource} not found.', details)


class ValidationError(AppError):
    code = 'VALIDATION_ERROR'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request.'


class ConflictError(AppError):
    code = 'CONFLICT'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Instructor has a conflicting booking at this time.'


class ForbiddenError(AppError):
    code = 'FORBIDDEN'
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You do not have permission to perform this action.'


class UnauthorizedError(AppError):
    code = 'UNAUTHORIZED'
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Authentication required.'


class StateError(AppError):
    code = 'INVALID_STATE'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'This transition is not allowed from the current status.'


def error_payload(exc: AppError) -> dict:
    error = {'code': exc.code, 'message': exc.message}
    if exc.details:
        error['details'] = exc.details
    return {
        'success': False,
        'error': error,
        'correlationId': get_correlation_id(),
    }


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error('Application error on %s: %s', request.url.path, exc.message)
        else:
            logger.warning('Client error on %s: %s (%s)', request.url.path, exc.message, exc.code)
        return JSONResponse(status_code=exc.status_code, content=error_payload(exc))
