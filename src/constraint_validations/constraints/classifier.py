"""
Violation classifier.

Maps a reported constraint violation onto the cached metadata of the table being
written and yields the affected field(s) with a message category. Pure and
synchronous: no database access.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from constraint_validations.exceptions.base import Field
from constraint_validations.exceptions.integrity_classifier import ViolationInfo, ViolationKind

from .identifiers import canonical_identifier
from .metadata import Columns, TableConstraintMetadata

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    UNKNOWN = "unknown"


def parse_direction(message_text: str | None) -> Direction:
    """
    Derive the direction of a foreign key violation from the primary error message.

    Heuristic tied to PostgreSQL's message format:
      'insert or update on table "albums" violates foreign key constraint ...'
          -> INSERT: the written row references a missing row
      'update or delete on table "artists" violates foreign key constraint ... on table "albums"'
          -> UPDATE: another table's row references the row being changed

    The message is matched on its leading word only; localized server messages
    (lc_messages other than English) come out as UNKNOWN.
    """
    text = (message_text or "").lstrip().lower()
    if text.startswith("insert"):
        return Direction.INSERT
    if text.startswith("update"):
        return Direction.UPDATE
    return Direction.UNKNOWN


@dataclass(frozen=True)
class FieldError:
    field: Field
    category: str


@dataclass(frozen=True)
class NoMetadata:
    """The table has no usable metadata snapshot."""


@dataclass(frozen=True)
class Unclassified:
    """The violation could not be mapped onto the metadata."""


@dataclass(frozen=True)
class Fields:
    errors: tuple[FieldError, ...]
    skip_schema_check: bool = False


ClassificationResult = Union[NoMetadata, Unclassified, Fields]

NO_METADATA = NoMetadata()
UNCLASSIFIED = Unclassified()


def field_for(columns: Columns) -> Field:
    """A single column is reported bare, several columns as a tuple."""
    return columns[0] if len(columns) == 1 else tuple(columns)


def _lookup(mapping, key, category: str, *, skip_schema_check: bool = False) -> ClassificationResult:
    columns = mapping.get(key)
    if not columns:
        return UNCLASSIFIED
    return Fields((FieldError(field_for(columns), category),), skip_schema_check=skip_schema_check)


def classify(violation: ViolationInfo, metadata: TableConstraintMetadata | None) -> ClassificationResult:
    """
    Classify `violation` against the table's metadata snapshot.

    Returns NO_METADATA when there is no snapshot, UNCLASSIFIED when the violation
    does not map onto a known constraint, or Fields with the affected field.
    """
    if metadata is None:
        return NO_METADATA

    constraint = canonical_identifier(violation.constraint_name)

    if violation.kind is ViolationKind.NOT_NULL:
        column = canonical_identifier(violation.column_name)
        if not column:
            return UNCLASSIFIED
        return Fields((FieldError(column, "not_null"),))

    if violation.kind is ViolationKind.CHECK:
        return _lookup(metadata.checks, constraint, "check")

    if violation.kind is ViolationKind.UNIQUE:
        return _lookup(metadata.unique_indexes, constraint, "unique")

    if violation.kind is ViolationKind.FOREIGN_KEY:
        direction = parse_direction(violation.message_text)
        if direction is Direction.INSERT:
            return _lookup(metadata.foreign_keys, constraint, "foreign_key")
        if direction is Direction.UPDATE:
            # The constraint belongs to the referencing table, so the reported
            # schema/table are that table's and the schema check does not apply.
            key = (
                canonical_identifier(violation.reported_schema),
                canonical_identifier(violation.reported_table),
                constraint,
            )
            return _lookup(metadata.referenced_by, key, "referenced_by", skip_schema_check=True)
        logger.debug("classifier.unknown_direction", extra={"constraint": constraint})

    return UNCLASSIFIED
