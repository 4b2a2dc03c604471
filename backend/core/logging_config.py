import logging

from backend.core import config
from backend.core.request_context import CorrelationIdFilter

LOG_FORMAT = '%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s'


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    root.setLevel(level or config.LOG_LEVEL)

    if not root.handlers:
        root.addHandler(logging.StreamHandler())

    for handler in root.handlers:
        if not any(isinstance(existing, CorrelationIdFilter) for existing in handler.filters):
            handler.addFilter(CorrelationIdFilter())
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
