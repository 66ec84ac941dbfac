"""
Logging configuration.

Call setup_logging() once from the entrypoint (the app factory does). Modules
only ever do ``logger = logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import logging.config

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure the weatherlog logger tree with a single stdout handler."""
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": DEFAULT_LOG_FORMAT, "datefmt": DEFAULT_DATE_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "weatherlog": {"handlers": ["console"], "level": level.upper(), "propagate": False},
        },
    })
