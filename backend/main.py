import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.errors import register_error_handlers
from backend.core.logging_config import configure_logging
from backend.core.request_context import reset_correlation_id, set_correlation_id
from backend.database import Base, SessionLocal, engine, ensure_booking_schema
from backend.jobs.escalation import EscalationJob, EscalationScheduler
from backend.models import audit_log, availability, booking, tenant, user  # noqa: F401
from backend.routes import audit_routes, auth_routes, availability_routes, booking_routes
from backend.services.handles import build_handles

configure_logging()
config.validate_runtime_config()

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_error_handlers(app)

logger = logging.getLogger(__name__)

app.state.handles = build_handles(SessionLocal)
app.state.escalation_scheduler = None


@app.middleware('http')
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = request.headers.get('X-Correlation-ID') or str(uuid.uuid4())
    token = set_correlation_id(correlation_id)
    try:
        response = await call_next(request)
    finally:
        reset_correlation_id(token)
    response.headers['X-Correlation-ID'] = correlation_id
    return response


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_booking_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.on_event('startup')
def start_escalation_scheduler() -> None:
    if not config.ESCALATION_ENABLED:
        logger.info('[EscalationJob] Disabled by ESCALATION_ENABLED')
        return

    handles = app.state.handles
    job = EscalationJob(handles.session_factory, handles.audit, handles.notifier)
    scheduler = EscalationScheduler(job, interval_seconds=config.ESCALATION_CHECK_INTERVAL_MS / 1000)
    scheduler.start()
    app.state.escalation_scheduler = scheduler


@app.on_event('shutdown')
def stop_escalation_scheduler() -> None:
    scheduler = app.state.escalation_scheduler
    if scheduler is not None:
        scheduler.stop()
        app.state.escalation_scheduler = None
    engine.dispose()


@app.get('/')
def root():
    return {'status': 'Scheduling API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(booking_routes.router, prefix='/bookings')
app.include_router(availability_routes.router, prefix='/availability')
app.include_router(audit_routes.router, prefix='/audit')
