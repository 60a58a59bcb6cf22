import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.engine import Dialect
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

# =================================================================================================================
# Violation kinds
# =================================================================================================================


class ViolationKind(str, Enum):
    NOT_NULL = "not_null"
    CHECK = "check"
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"


# =================================================================================================================
# Postgres error code mapping
# =================================================================================================================

# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    UNIQUE_VIOLATION = "23505"
    CHECK_VIOLATION = "23514"


PGCODE_KIND_MAP: dict[str, ViolationKind] = {
    PostgresErrorCodes.NOT_NULL_VIOLATION.value: ViolationKind.NOT_NULL,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION.value: ViolationKind.FOREIGN_KEY,
    PostgresErrorCodes.UNIQUE_VIOLATION.value: ViolationKind.UNIQUE,
    PostgresErrorCodes.CHECK_VIOLATION.value: ViolationKind.CHECK,
}

# Drivers that expose the server's structured error fields (schema, table, constraint, column).
STRUCTURED_ERROR_DRIVERS = frozenset({"psycopg2", "psycopg", "asyncpg"})


def supports_error_info(dialect: Dialect) -> bool:
    """
    Whether violations raised through `dialect` carry structured error info.

    Only PostgreSQL with psycopg2, psycopg (3) or asyncpg qualifies.
    """
    return dialect.name == "postgresql" and dialect.driver in STRUCTURED_ERROR_DRIVERS


# =================================================================================================================
# Structured error info
# =================================================================================================================


@dataclass(frozen=True)
class ViolationInfo:
    """What the server reported about a single failed write."""

    kind: ViolationKind
    reported_schema: str | None
    reported_table: str | None
    constraint_name: str | None
    column_name: str | None
    message_text: str


def _sqlstate(orig) -> str | None:
    # psycopg 3 exposes `sqlstate`, psycopg2 and the SQLAlchemy asyncpg adapter `pgcode`
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def violation_kind(exc: IntegrityError) -> ViolationKind | None:
    """
    Map the SQLSTATE of a SQLAlchemy IntegrityError to a ViolationKind.

    Returns None for integrity errors that are not one of the four handled violations
    (e.g. exclusion constraints) or that carry no SQLSTATE at all.
    """
    pgcode = _sqlstate(exc.orig)
    if not pgcode:
        return None

    kind = PGCODE_KIND_MAP.get(pgcode)
    if kind is None:
        logger.debug("integrity.unhandled_sqlstate", extra={"pgcode": pgcode})
    return kind


def _diagnostics(orig) -> dict[str, str | None]:
    """
    Read the structured error fields from the DBAPI exception.

    psycopg / psycopg2 expose them on `orig.diag`; SQLAlchemy's asyncpg adapter
    chains the asyncpg exception as `orig.__cause__`, which has them as attributes.
    """
    diag = getattr(orig, "diag", None)
    if diag is not None:
        return {
            "schema": getattr(diag, "schema_name", None),
            "table": getattr(diag, "table_name", None),
            "constraint": getattr(diag, "constraint_name", None),
            "column": getattr(diag, "column_name", None),
            "message_primary": getattr(diag, "message_primary", None),
        }

    cause = getattr(orig, "__cause__", None)
    if cause is not None and hasattr(cause, "constraint_name"):
        return {
            "schema": getattr(cause, "schema_name", None),
            "table": getattr(cause, "table_name", None),
            "constraint": getattr(cause, "constraint_name", None),
            "column": getattr(cause, "column_name", None),
            "message_primary": getattr(cause, "message", None),
        }

    raise LookupError(f"no structured error info on {type(orig).__name__}")


def extract_violation_info(exc: IntegrityError) -> ViolationInfo:
    """
    Build a ViolationInfo from a SQLAlchemy IntegrityError.

    Raises:
        LookupError: if the error is not a handled violation or the driver error
            does not carry structured diagnostics.
    """
    kind = violation_kind(exc)
    if kind is None:
        raise LookupError("not a handled constraint violation")

    diag = _diagnostics(exc.orig)

    return ViolationInfo(
        kind=kind,
        reported_schema=diag["schema"],
        reported_table=diag["table"],
        constraint_name=diag["constraint"],
        column_name=diag["column"],
        message_text=diag["message_primary"] or "",
    )
