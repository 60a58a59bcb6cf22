# src/constraint_validations/core/logging/formatters.py
"""
Custom logging formatters.

  - JsonFormatter: one JSON object per record, for log collectors.
  - ColorFormatter: compact ANSI-colored lines for a developer console.

The builder (dictConfig) picks one of them from settings.LOG_FORMAT.
"""

import json
import logging
from typing import Any
from logging import LogRecord

from constraint_validations.utils.logging import DISTRIBUTION, get_project_version

PROJECT_VERSION = get_project_version()

# Attributes every LogRecord has; anything else on the record came from `extra`.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Every line carries timestamp, level, logger, message, source location, the
    `write_target` stamped by WriteTargetFilter and service/env/version. Keys passed
    through `extra` (e.g. table, kind, fields) are added as top-level keys;
    values json cannot encode are stringified, so formatting never fails.
    """

    def __init__(self, *, env: str | None = None, service: str = DISTRIBUTION, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service

    def _base_fields(self, record: LogRecord) -> dict[str, Any]:
        return {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "write_target": getattr(record, "write_target", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

    def format(self, record: LogRecord) -> str:
        payload = self._base_fields(record)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in payload or key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = _jsonable(value)

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Console formatter: TIMESTAMP | LEVEL | LOGGER | WRITE_TARGET | MESSAGE, level
    name colorized, traceback appended when present.
    """

    RESET = "\033[0m"
    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;41m",
    }

    def format(self, record: LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        columns = [
            self.formatTime(record, self.datefmt),
            f"{color}{record.levelname:<8}{self.RESET}",
            f"{record.name:<30}",
            f"{getattr(record, 'write_target', '-'):<20}",
            record.getMessage(),
        ]
        line = " | ".join(columns)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line
