"""
Validation error assembler.

Turns a ClassificationResult into either a ValidationFailure (field, message pairs)
or a Reraise of the original violation. `convert_violation` runs extraction,
classification and assembly behind a single guard: whatever goes wrong while
converting, the outcome is Reraise of the original error.
"""

import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy.exc import IntegrityError

from constraint_validations.exceptions.base import Field
from constraint_validations.exceptions.integrity_classifier import extract_violation_info

from .classifier import ClassificationResult, Fields, classify
from .identifiers import canonical_identifier
from .messages import MessageTable
from .metadata import TableConstraintMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationFailure:
    errors: tuple[tuple[Field, str], ...]


@dataclass(frozen=True)
class Reraise:
    violation: BaseException


AssembledOutcome = Union[ValidationFailure, Reraise]


def assemble(
    result: ClassificationResult,
    reported_schema: str | None,
    reported_table: str | None,
    metadata: TableConstraintMetadata | None,
    original_violation: BaseException,
    messages: MessageTable,
) -> AssembledOutcome:
    """
    Render a classification result through the message table.

    Errors are discarded (Reraise) when the violation was reported for another
    table than the one being written, e.g. raised by a trigger writing elsewhere.
    Referenced-by violations skip that check: they are always reported for the
    referencing table.
    """
    if not isinstance(result, Fields) or metadata is None:
        return Reraise(original_violation)

    if not result.skip_schema_check:
        reported = (canonical_identifier(reported_schema), canonical_identifier(reported_table))
        if reported != (metadata.schema, metadata.table):
            logger.debug(
                "assembler.table_mismatch",
                extra={"table": metadata.qualified_name,
                       "reported_table": ".".join(str(p) for p in reported)},
            )
            return Reraise(original_violation)

    if not result.errors:
        return Reraise(original_violation)

    return ValidationFailure(
        tuple((error.field, messages[error.category]) for error in result.errors)
    )


def convert_violation(
    exc: IntegrityError,
    metadata: TableConstraintMetadata | None,
    messages: MessageTable,
) -> AssembledOutcome:
    """
    Convert a low-level violation into a ValidationFailure, or Reraise it.

    Never raises: any failure while converting is logged and yields Reraise(exc).
    """
    if metadata is None:
        return Reraise(exc)

    try:
        info = extract_violation_info(exc)
        result = classify(info, metadata)
        outcome = assemble(result, info.reported_schema, info.reported_table, metadata, exc, messages)
    except Exception:
        logger.warning(
            "assembler.conversion_failed",
            extra={"table": metadata.qualified_name},
            exc_info=True,
        )
        return Reraise(exc)

    if isinstance(outcome, Reraise):
        logger.debug(
            "assembler.unclassified",
            extra={"table": metadata.qualified_name, "kind": info.kind.value,
                   "constraint": info.constraint_name},
        )
    return outcome
