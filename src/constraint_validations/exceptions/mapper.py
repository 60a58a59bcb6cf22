"""
Write-path interception: route constraint violations raised by an insert/update
through the table binding and raise ValidationFailedError when they convert.

    async with constraint_error_handler(binding):
        session.add(album)
        await session.flush()

Only IntegrityErrors with a handled SQLSTATE are looked at. Anything else, and any
violation that does not convert, propagates exactly as raised.
"""

import logging
from contextlib import asynccontextmanager, contextmanager

from sqlalchemy.exc import IntegrityError

from constraint_validations.constraints.assembler import ValidationFailure
from constraint_validations.constraints.binding import TableBinding
from constraint_validations.core.logging.filters import reset_write_target, set_write_target

from .base import ValidationErrors, ValidationFailedError
from .integrity_classifier import violation_kind

logger = logging.getLogger(__name__)


def build_validation_error(binding: TableBinding, failure: ValidationFailure,
                           exc: IntegrityError) -> ValidationFailedError:
    errors = ValidationErrors()
    for field, message in failure.errors:
        errors.add(field, message)

    if binding.field_splitter is not None:
        binding.field_splitter(errors)

    return ValidationFailedError(errors, wrapped_exception=exc)


def _handle_integrity_error(binding: TableBinding, exc: IntegrityError) -> None:
    """
    Raise ValidationFailedError for a convertible violation; return otherwise so the
    caller re-raises the original exception with a bare `raise`.
    """
    kind = violation_kind(exc)
    if kind is None:
        return

    outcome = binding.convert(exc)
    if not isinstance(outcome, ValidationFailure):
        return

    try:
        error = build_validation_error(binding, outcome, exc)
    except Exception:
        logger.warning("mapper.build_failed", extra={"table": binding.name}, exc_info=True)
        return

    logger.info(
        "mapper.violation_converted",
        extra={"table": binding.name, "kind": kind.value, "fields": error.fields},
    )
    # keep the violation's traceback so the failure points at the write that raised it
    raise error.with_traceback(exc.__traceback__) from exc


@asynccontextmanager
async def constraint_error_handler(binding: TableBinding):
    """
    Usage:
        async with constraint_error_handler(binding):
            ... INSERT / UPDATE that may raise IntegrityError ...

    Transaction handling (rollback) is left to the caller.
    """
    token = set_write_target(binding.name)
    try:
        yield
    except IntegrityError as exc:
        _handle_integrity_error(binding, exc)
        raise
    finally:
        reset_write_target(token)


@contextmanager
def constraint_error_handler_sync(binding: TableBinding):
    """Synchronous counterpart of constraint_error_handler, for Session/Connection writes."""
    token = set_write_target(binding.name)
    try:
        yield
    except IntegrityError as exc:
        _handle_integrity_error(binding, exc)
        raise
    finally:
        reset_write_target(token)
