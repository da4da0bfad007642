"""Central logging configuration for the application.

Applies a root stdout handler so all module loggers emit without per-module
setup. Every record carries the current request id (or "-" outside a
request). Keeps uvicorn loggers visible and avoids duplicate handlers on
reloads.
"""
from __future__ import annotations
import copy
import logging
from contextvars import ContextVar
from logging.config import dictConfig

# Set by RequestIdMiddleware for the duration of each HTTP request
REQUEST_ID: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = REQUEST_ID.get()
        return True


_DICT_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": RequestIdFilter},
    },
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s:%(name)s:[%(request_id)s] %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "default",
            "filters": ["request_id"],
            "stream": "ext://sys.stdout",
        }
    },
    "root": {"level": "INFO", "handlers": ["console"]},
    "loggers": {
        "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
    },
}


def configure_logging(level: str = "INFO") -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers, only the level is adjusted so
    reloaders and test runners do not get duplicate output.
    """
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    config = copy.deepcopy(_DICT_CONFIG)
    config["handlers"]["console"]["level"] = level
    config["root"]["level"] = level
    dictConfig(config)


__all__ = ["REQUEST_ID", "RequestIdFilter", "configure_logging"]
