"""
Error messages used when a constraint violation is converted into a validation failure.

There is a single, generic message per violation category. Messages can be overridden
at configuration time; the merged table is read-only afterwards and shared by every
write that goes through the same table binding.
"""

from collections.abc import Mapping
from types import MappingProxyType

# Recognized categories, in the order they are documented.
MESSAGE_CATEGORIES: tuple[str, ...] = (
    "not_null",
    "check",
    "unique",
    "foreign_key",
    "referenced_by",
)

MessageTable = Mapping[str, str]

DEFAULT_ERROR_MESSAGES: MessageTable = MappingProxyType({
    "not_null": "is not present",
    "check": "is invalid",
    "unique": "is already taken",
    "foreign_key": "is invalid",
    "referenced_by": "cannot be changed currently",
})


def build_message_table(
    overrides: Mapping[str, str] | None = None,
    base: MessageTable = DEFAULT_ERROR_MESSAGES,
) -> MessageTable:
    """
    Merge `overrides` onto `base` and return a read-only message table.

    Raises:
        ValueError: if an override key is not a recognized category.
    """
    overrides = dict(overrides or {})
    unknown = sorted(set(overrides) - set(MESSAGE_CATEGORIES))
    if unknown:
        raise ValueError(f"Unknown constraint message key(s): {', '.join(unknown)}")

    merged = dict(base)
    merged.update(overrides)
    return MappingProxyType(merged)
