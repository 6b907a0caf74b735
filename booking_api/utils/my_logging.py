# booking_api/utils/my_logging.py
"""Logging configuration for the API process and the notification worker"""
import logging
import sys
from contextvars import ContextVar
from typing import Optional

from booking_api.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

# Set per request by the correlation middleware
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "httpx",
    "httpcore",
    "celery",
    "kombu",
    "uvicorn.access",
)


class CorrelationIdFilter(logging.Filter):
    """Stamps every record with the correlation id of the current request"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = correlation_id_var.get()
        return True


def setup_logging(verbose: bool = True, level: Optional[str] = None) -> None:
    """Configure application logging. Safe to call more than once."""
    settings = get_settings()

    if verbose:
        resolved = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    else:
        resolved = logging.WARNING

    root = logging.getLogger()
    root.setLevel(resolved)
    for handler in list(root.handlers):
        if isinstance(handler, logging.StreamHandler) and getattr(handler, "booking_api", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.booking_api = True
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # Silence noisy loggers
    noisy_level = logging.WARNING if verbose else logging.ERROR
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
