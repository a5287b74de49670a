"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from lifeplan.core.context import get_request_id, get_user_id


class RequestContextFilter(logging.Filter):
    """Stamp request_id and user_id onto every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        record.user_id = get_user_id() or "-"
        return True


def configure_logging(*, log_level: str = "INFO", debug: bool = False) -> None:
    """Configure application logging once at startup.

    ``debug`` turns on DEBUG output for the ``lifeplan`` loggers only, leaving
    third-party loggers at ``log_level``.
    """
    app_level = "DEBUG" if debug else log_level
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | user=%(user_id)s | %(message)s",
                }
            },
            "filters": {
                "request_context": {
                    "()": "lifeplan.core.logging.RequestContextFilter",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": app_level,
                    "filters": ["request_context"],
                }
            },
            "loggers": {
                # openai/httpx log every request at INFO
                "httpx": {"level": "WARNING"},
                "openai": {"level": "WARNING"},
                "lifeplan": {"level": app_level},
            },
            "root": {
                "handlers": ["console"],
                "level": log_level,
            },
        }
    )

    logging.getLogger(__name__).debug("Logging configured at %s (lifeplan at %s)", log_level, app_level)
    setattr(configure_logging, "_configured", True)
