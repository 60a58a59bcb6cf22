# src/constraint_validations/core/logging/filters.py
"""
Logging filters

Write-target filter and helpers for logging.

While an insert/update runs inside the write-path interceptor, the qualified name of
the table being written (e.g. "public.albums") is stored in a context variable. The
`WriteTargetFilter` copies it onto every `LogRecord` as `write_target`, so log lines
emitted by the driver, SQLAlchemy or this package during a failed write can be
correlated with the table that was being written.

A `ContextVar` is used instead of `threading.local()` so the value survives `await`
boundaries and stays isolated between concurrent asyncio tasks.

Records that are emitted outside of a write get the sentinel "-", so formatters that
reference `%(write_target)s` never raise KeyError.
"""

import logging
from logging import LogRecord
import contextvars

_write_target_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "write_target", default=None
)


def set_write_target(write_target: str | None):
    """
    Set the write target in the current context and return the token to allow reset.
    """
    return _write_target_ctx.set(write_target)


def reset_write_target(token) -> None:
    """
    Reset the contextvar to the previously saved token returned by set_write_target().
    """
    _write_target_ctx.reset(token)


def get_write_target() -> str | None:
    return _write_target_ctx.get()


class WriteTargetFilter(logging.Filter):
    """
    Logging filter that guarantees every LogRecord has a `write_target` attribute.

    Precedence:
      - record.write_target if it was passed explicitly via `extra`
      - otherwise the contextvar value set by the write-path interceptor
      - otherwise "-"
    """

    def filter(self, record: LogRecord) -> bool:
        record.write_target = (
            getattr(record, "write_target", None) or get_write_target() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """
    Mask record attributes that may carry row values.

    Constraint violations come with a DETAIL line ("Key (email)=(a@b.c) already exists.")
    and the failed statement parameters; neither belongs in logs.
    """

    SENSITIVE = {"detail", "params", "parameters", "password", "secret", "token"}

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = "***REDACTED***"
        return True
