"""
Constraint metadata snapshot.

`build_constraint_metadata` introspects a table once, when its binding is set up,
and returns an immutable `TableConstraintMetadata`. Nothing reads the catalog after
that: a failed write usually leaves the transaction aborted, so the classifier has
to work from this snapshot alone.

A return value of None is a permanent no-op state (derived source, or a driver
without structured error info), not an error.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from sqlalchemy.engine import Connection
from sqlalchemy.sql.expression import TableClause

from constraint_validations.exceptions.integrity_classifier import supports_error_info

from .catalog import ConstraintCatalog, PostgresConstraintCatalog
from .identifiers import canonical_identifier

logger = logging.getLogger(__name__)

Columns = tuple[str, ...]
ReferenceKey = tuple[str, str, str]

_EMPTY: Mapping = MappingProxyType({})
_MAPPING_FIELDS = ("checks", "unique_indexes", "foreign_keys", "referenced_by")


@dataclass(frozen=True)
class TableConstraintMetadata:
    """
    Constraint facts about one table, captured before any write is attempted.

    - checks: CHECK constraint name -> columns
    - unique_indexes: unique index name -> columns (no expression indexes)
    - foreign_keys: name of a foreign key defined on this table -> its columns
    - referenced_by: (schema, table, constraint) of a foreign key on another table
      -> the columns of this table it references
    """

    schema: str
    table: str
    checks: Mapping[str, Columns] = field(default_factory=lambda: _EMPTY)
    unique_indexes: Mapping[str, Columns] = field(default_factory=lambda: _EMPTY)
    foreign_keys: Mapping[str, Columns] = field(default_factory=lambda: _EMPTY)
    referenced_by: Mapping[ReferenceKey, Columns] = field(default_factory=lambda: _EMPTY)

    def __post_init__(self):
        # snapshot whatever mappings were passed in; callers keep no handle on the copies
        for name in _MAPPING_FIELDS:
            frozen = MappingProxyType({k: tuple(v) for k, v in getattr(self, name).items()})
            object.__setattr__(self, name, frozen)

    def __hash__(self):
        # the mapping fields are read-only proxies; hash their frozen contents
        frozen = tuple(frozenset(getattr(self, name).items()) for name in _MAPPING_FIELDS)
        return hash((self.schema, self.table) + frozen)

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.table}"


def _group(rows: Iterable[tuple], key_width: int) -> dict:
    """
    Group (key..., column) rows into key -> tuple(columns), preserving row order.

    Keys and columns are canonicalized. A single-part key is stored bare, wider keys
    as tuples.
    """
    grouped: dict = {}
    for row in rows:
        key = tuple(canonical_identifier(part) for part in row[:key_width])
        if key_width == 1:
            key = key[0]
        grouped.setdefault(key, []).append(canonical_identifier(row[key_width]))
    return {k: tuple(v) for k, v in grouped.items()}


def split_source(source) -> tuple[str | None, str] | None:
    """
    Return (schema, table) for a simple table source, or None for anything else.

    Simple sources are a table name ("albums"), a qualified name ("music.albums")
    or a SQLAlchemy Table/TableClause. Subqueries, joins, aliases and functions are
    not simple.
    """
    if isinstance(source, str):
        schema, _, table = source.rpartition(".")
        return (schema or None, table)
    if isinstance(source, TableClause):
        return (source.schema, source.name)
    return None


def build_constraint_metadata(
    connection: Connection,
    source,
    *,
    catalog: ConstraintCatalog | None = None,
) -> TableConstraintMetadata | None:
    """
    Introspect `source` and return its constraint metadata snapshot.

    Returns None, without querying the catalog, when the source is not a simple table
    or when the connection's driver cannot report structured violation info.

    Catalog errors (missing table, insufficient privileges) propagate to the caller.
    """
    names = split_source(source)
    if names is None:
        logger.debug("metadata.skipped", extra={"reason": "derived_source", "source": repr(source)})
        return None

    if not supports_error_info(connection.dialect):
        logger.debug(
            "metadata.skipped",
            extra={"reason": "no_error_info", "dialect": connection.dialect.name,
                   "driver": connection.dialect.driver},
        )
        return None

    if catalog is None:
        catalog = PostgresConstraintCatalog(connection)

    resolved = catalog.resolve(*names)

    metadata = TableConstraintMetadata(
        schema=canonical_identifier(resolved.schema),
        table=canonical_identifier(resolved.table),
        checks=_group(catalog.check_constraints(resolved.oid), 1),
        unique_indexes=_group(catalog.unique_indexes(resolved.oid), 1),
        foreign_keys=_group(catalog.foreign_keys(resolved.oid), 1),
        referenced_by=_group(catalog.referenced_by(resolved.oid), 3),
    )

    logger.info(
        "metadata.built",
        extra={
            "table": metadata.qualified_name,
            "checks": len(metadata.checks),
            "unique_indexes": len(metadata.unique_indexes),
            "foreign_keys": len(metadata.foreign_keys),
            "referenced_by": len(metadata.referenced_by),
        },
    )
    return metadata
