"""
Convert PostgreSQL constraint violations raised by inserts/updates into per-field
validation errors, using constraint metadata captured when the table is bound.
"""

from .constraints.binding import TableBinding
from .constraints.messages import DEFAULT_ERROR_MESSAGES, build_message_table
from .constraints.metadata import TableConstraintMetadata, build_constraint_metadata
from .exceptions.base import ValidationErrors, ValidationFailedError, split_validation_errors
from .exceptions.mapper import constraint_error_handler, constraint_error_handler_sync

__all__ = [
    "TableBinding",
    "DEFAULT_ERROR_MESSAGES",
    "build_message_table",
    "TableConstraintMetadata",
    "build_constraint_metadata",
    "ValidationErrors",
    "ValidationFailedError",
    "split_validation_errors",
    "constraint_error_handler",
    "constraint_error_handler_sync",
]
