# src/constraint_validations/core/logging/builder.py
"""
Logging builder: turn Settings into a dictConfig mapping and apply it.

    setup_logging(settings)

is the only call an application needs; `make_dict_config(settings)` is exposed so
the mapping can be inspected in tests.

File logging is used when LOG_TO_STDOUT is false and LOG_DIR is set (console,
file, error_file). Otherwise everything goes to the console (console,
error_console).
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config

from constraint_validations.utils.logging import DISTRIBUTION
from constraint_validations.config.settings import Settings

from .formatters import JsonFormatter, ColorFormatter
from .filters import WriteTargetFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)

STANDARD_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(write_target)s | %(message)s"


def _logs_to_files(settings: Settings) -> bool:
    return not settings.LOG_TO_STDOUT and bool(settings.LOG_DIR)


def _formatters(settings: Settings) -> dict:
    return {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": STANDARD_FORMAT,
        },
        "json": {"()": JsonFormatter, "env": settings.ENV, "service": DISTRIBUTION},
    }


def _handlers(settings: Settings) -> dict[str, dict]:
    if _logs_to_files(settings):
        return {
            "console": get_console_handler(settings),
            "file": get_file_handler(settings),
            "error_file": get_error_file_handler(settings),
        }
    return {
        "console": get_console_handler(settings),
        "error_console": get_error_console_handler(settings),
    }


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping: "standard"/"json" formatters, "write_target"/"redact"
    filters, the handlers chosen above, and the root, constraint_validations and
    sqlalchemy.engine loggers.
    """
    handlers = _handlers(settings)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _formatters(settings),
        "filters": {
            "write_target": {"()": WriteTargetFilter},
            "redact": {"()": RedactFilter},
        },
        "handlers": handlers,
        "loggers": {
            "": {"handlers": list(handlers), "level": settings.LOG_LEVEL},
            "constraint_validations": {"level": settings.LOG_LEVEL, "propagate": True},
            # engine logs carry bound parameters (row values); opt-in only
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Apply the logging configuration for `settings`.

    LOG_DIR is created when logging to files. A WriteTargetFilter is also installed
    on the root logger so `write_target` exists on records routed to handlers that
    other libraries add later.
    """
    if _logs_to_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    root = logging.getLogger()
    if not any(isinstance(f, WriteTargetFilter) for f in root.filters):
        root.addFilter(WriteTargetFilter())
