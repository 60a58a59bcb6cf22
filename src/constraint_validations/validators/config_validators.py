from typing import Any

from constraint_validations.constraints.messages import MESSAGE_CATEGORIES


def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.upper()


def to_lowercase(value: str | None) -> str | None:
    """
    Converts a string to lowercase if it's not None.
    """
    if value is None:
        return None
    return value.lower()


def check_message_overrides(value: dict[str, Any] | None) -> dict[str, str]:
    """
    Validate a mapping of constraint message overrides.

    Keys must be one of the recognized violation categories and values must be strings.
    Returns a plain dict (empty when nothing was configured).
    """
    if not value:
        return {}

    unknown = sorted(set(value) - set(MESSAGE_CATEGORIES))
    if unknown:
        raise ValueError(
            f"Unknown constraint message key(s): {', '.join(unknown)} "
            f"(expected one of: {', '.join(MESSAGE_CATEGORIES)})"
        )

    not_strings = sorted(k for k, v in value.items() if not isinstance(v, str))
    if not_strings:
        raise ValueError(f"Constraint message(s) must be strings: {', '.join(not_strings)}")

    return dict(value)
