from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.core.errors import ConflictError, NotFoundError, StateError, register_error_handlers
from backend.core.request_context import reset_correlation_id, set_correlation_id


def _app_raising(exc: Exception) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.middleware('http')
    async def correlation(request, call_next):
        token = set_correlation_id('corr-42')
        try:
            return await call_next(request)
        finally:
            reset_correlation_id(token)

    @app.get('/boom')
    def boom():
        raise exc

    return app


def test_conflict_renders_stable_code() -> None:
    client = TestClient(_app_raising(ConflictError()))

    response = client.get('/boom')

    assert response.status_code == 409
    assert response.json() == {
        'success': False,
        'error': {
            'code': 'CONFLICT',
            'message': 'Instructor has a conflicting booking at this time.',
        },
        'correlationId': 'corr-42',
    }


def test_not_found_names_the_resource() -> None:
    client = TestClient(_app_raising(NotFoundError('Booking')))

    response = client.get('/boom')

    assert response.status_code == 404
    assert response.json()['error'] == {'code': 'NOT_FOUND', 'message': 'Booking not found.'}


def test_state_error_includes_details() -> None:
    client = TestClient(_app_raising(StateError('Cannot cancel booking in status: COMPLETED', {'status': 'COMPLETED'})))

    response = client.get('/boom')

    assert response.status_code == 409
    assert response.json()['error']['code'] == 'INVALID_STATE'
    assert response.json()['error']['details'] == {'status': 'COMPLETED'}
