"""Logging for the audit service.

One stdout handler on the root logger; module loggers emit
``event_name key=value`` lines through it. ``AUDIT_LOG_LEVEL`` picks the
level (INFO by default). SQLAlchemy's engine logger stays at WARNING so SQL
storage does not echo statements.
"""
from __future__ import annotations
import logging
import os
from logging.config import dictConfig
from typing import Any, Dict, Optional

LOG_LEVEL_ENV = "AUDIT_LOG_LEVEL"
_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def resolve_level(level: Optional[str] = None) -> str:
    value = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").strip().upper()
    return value if value in _LEVELS else "INFO"


def build_logging_config(level: str) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s:%(name)s:%(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "retail_audit": {"level": level},
            "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging once; later calls are no-ops while handlers exist."""
    if logging.getLogger().handlers:
        return
    dictConfig(build_logging_config(resolve_level(level)))


__all__ = ["LOG_LEVEL_ENV", "resolve_level", "build_logging_config", "configure_logging"]
