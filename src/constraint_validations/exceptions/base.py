"""
Repository-level exceptions and the validation error container.
"""

from typing import Iterable, Iterator, Union

# A single column name, or a tuple of column names for multi-column constraints.
Field = Union[str, tuple[str, ...]]


class RepositoryError(Exception):
    """
    Base of the errors raised by repositories.

    Attributes:
        message: client-safe description
        fields: column names the error is about, if any
        constraint: database constraint involved; kept for logs, never in payloads
        error_code: short machine-readable code ("invalid_input", "not_found")
    """

    STATUS_BY_CODE = {
        "invalid_input": 422,
        "not_found": 404,
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        details = [
            f"{label}={value}"
            for label, value in (
                ("code", self.error_code),
                ("fields", ",".join(self.fields or ())),
                ("constraint", self.constraint),
            )
            if value
        ]
        return f"{self.message} [{' '.join(details)}]" if details else self.message

    def to_payload(self) -> dict:
        """
        JSON-ready body for an API error response:
            {"detail": "name is already taken", "code": "invalid_input", "fields": ["name"]}
        """
        payload = {"detail": self.message}
        if self.error_code:
            payload["code"] = self.error_code
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        return self.STATUS_BY_CODE.get(self.error_code, 400)


class ValidationErrors(dict):
    """
    Validation messages keyed by field.

    A key is either a column name or a tuple of column names (multi-column
    constraint). Values are lists of messages, in the order they were added.
    """

    def add(self, field: Field, message: str) -> None:
        self.setdefault(field, []).append(message)

    def on(self, field: Field) -> list[str] | None:
        """Messages for `field`, or None when the field has no errors."""
        messages = self.get(field)
        return list(messages) if messages else None

    def count(self) -> int:
        return sum(len(messages) for messages in self.values())

    def pairs(self) -> Iterator[tuple[Field, str]]:
        for field, messages in self.items():
            for message in messages:
                yield field, message

    def full_messages(self) -> list[str]:
        """
        Human readable messages, e.g. "email is already taken" or
        "artist_id and name is already taken" for a multi-column field.
        """
        out = []
        for field, message in self.pairs():
            name = " and ".join(field) if isinstance(field, tuple) else field
            out.append(f"{name} {message}")
        return out

    def field_names(self) -> list[str]:
        """Flat, de-duplicated list of column names involved in the errors."""
        names: list[str] = []
        for field in self:
            for name in (field if isinstance(field, tuple) else (field,)):
                if name not in names:
                    names.append(name)
        return names


def split_validation_errors(errors: ValidationErrors) -> None:
    """
    Split multi-column errors into one error per column, in place.

    ("artist_id", "name"): ["is already taken"] becomes
    "artist_id": ["is already taken"] and "name": ["is already taken"].
    """
    for field in [f for f in errors if isinstance(f, tuple)]:
        messages = errors.pop(field)
        for name in field:
            for message in messages:
                errors.add(name, message)


class ValidationFailedError(RepositoryError):
    """
    Raised when a constraint violation was converted into per-field validation errors.

    The low-level violation is kept as `wrapped_exception` and as `__cause__`.
    """

    def __init__(self, errors: ValidationErrors, *, wrapped_exception: BaseException | None = None,
                 constraint: str | None = None):
        self.errors = errors
        self.wrapped_exception = wrapped_exception
        message = ", ".join(errors.full_messages()) or "validation failed"
        super().__init__(message, fields=errors.field_names(), constraint=constraint,
                         error_code="invalid_input")


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, error_code="not_found")


__all__ = [
    "Field",
    "RepositoryError",
    "ValidationErrors",
    "ValidationFailedError",
    "NotFoundError",
    "split_validation_errors",
]
