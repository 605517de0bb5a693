"""
Logging Configuration

Console logging for the local note store process. Everything goes to
stdout; the level of the ``mindpad`` loggers follows LOG_LEVEL while
chatty third-party libraries are held at WARNING.
"""

import sys
from logging.config import dictConfig

from mindpad.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# SQL statements, HTTP request lines and SDK retries are noise at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "openai", "httpx")


def _console_logger(level: str) -> dict:
    return {"level": level, "handlers": ["console"], "propagate": False}


def setup_logging(level: str | None = None) -> None:
    """
    Configure root, application, server and third-party loggers.

    Args:
        level: Overrides settings.LOG_LEVEL (e.g. "DEBUG" from a script flag).

    Idempotent: dictConfig replaces the previous handlers, so calling it
    again from a script after the app module was imported is harmless.
    """
    app_level = (level or settings.LOG_LEVEL).upper()

    loggers = {
        "mindpad": _console_logger(app_level),
        "uvicorn": _console_logger("INFO"),
        "uvicorn.access": _console_logger("INFO"),
    }
    loggers.update({name: _console_logger("WARNING") for name in QUIET_LOGGERS})

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "default",
                },
            },
            "root": {"level": app_level, "handlers": ["console"]},
            "loggers": loggers,
        }
    )
