import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = _get_int(os.getenv("JWT_EXPIRES_MINUTES"), 15)

# Unassigned bookings older than this many hours get escalated once.
ESCALATION_HOURS = _get_int(os.getenv("ESCALATION_HOURS"), 2)
ESCALATION_CHECK_INTERVAL_MS = _get_int(os.getenv("ESCALATION_CHECK_INTERVAL_MS"), 300000)
ESCALATION_ENABLED = _get_bool(os.getenv("ESCALATION_ENABLED"), default=True)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = _get_int(os.getenv("MAX_PAGE_SIZE"), 100)
AUDIT_DEFAULT_PAGE_SIZE = 50


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if ESCALATION_HOURS <= 0:
        raise RuntimeError("ESCALATION_HOURS must be a positive number of hours.")
    if ESCALATION_CHECK_INTERVAL_MS <= 0:
        raise RuntimeError("ESCALATION_CHECK_INTERVAL_MS must be positive.")
