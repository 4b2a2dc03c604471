import logging
from contextvars import ContextVar, Token

_correlation_id_var: ContextVar[str] = ContextVar('correlation_id', default='')


def set_correlation_id(correlation_id: str | None) -> Token[str]:
    return _correlation_id_var.set(correlation_id or '')


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id_var.reset(token)


def get_correlation_id(default: str | None = None) -> str | None:
    value = _correlation_id_var.get()
    return value if value else default


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'correlation_id'):
            record.correlation_id = get_correlation_id('-')
        return True
