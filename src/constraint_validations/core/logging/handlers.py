# src/constraint_validations/core/logging/handlers.py
"""
Handler factories for logging.dictConfig.

Each factory returns a handler configuration dict. Formatter and filter names refer
to entries the builder declares ("standard"/"json", "write_target"/"redact").
"""

from pathlib import Path

from constraint_validations.config.settings import Settings

LOG_FILE = "constraint-validations.log"
ERROR_LOG_FILE = "errors.log"


def _formatter_name(settings: Settings) -> str:
    return "json" if settings.LOG_FORMAT == "json" else "standard"


def _stream(formatter: str, level: str) -> dict:
    return {
        "class": "logging.StreamHandler",
        "formatter": formatter,
        "level": level,
        "filters": ["write_target", "redact"],
    }


def _rotating_file(settings: Settings, filename: str, formatter: str, level: str) -> dict:
    return {
        **_stream(formatter, level),
        "class": "logging.handlers.RotatingFileHandler",
        "filename": str(Path(settings.LOG_DIR) / filename),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
    }


def get_console_handler(settings: Settings) -> dict:
    """stderr handler in the configured format and level."""
    return _stream(_formatter_name(settings), settings.LOG_LEVEL)


def get_error_console_handler(settings: Settings) -> dict:
    return _stream("json", "ERROR")


def get_file_handler(settings: Settings) -> dict:
    return _rotating_file(settings, LOG_FILE, _formatter_name(settings), settings.LOG_LEVEL)


# Errors also go to their own file, always as JSON lines.
def get_error_file_handler(settings: Settings) -> dict:
    return _rotating_file(settings, ERROR_LOG_FILE, "json", "ERROR")
