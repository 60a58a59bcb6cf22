"""
Read-only PostgreSQL catalog queries used to build a table's constraint metadata.

All queries go through SQLAlchemy `text()` on a synchronous Connection (use
`AsyncConnection.run_sync` from async code). Rows come back in declaration order:
constraint columns follow `conkey`/`confkey`, index columns follow `indkey`.
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import text
from sqlalchemy.engine import Connection


@dataclass(frozen=True)
class CatalogTable:
    oid: int
    schema: str
    table: str


class ConstraintCatalog(Protocol):
    """What the metadata builder needs from catalog introspection."""

    def resolve(self, schema: str | None, table: str) -> CatalogTable: ...

    def check_constraints(self, oid: int) -> list[tuple[str, str]]: ...

    def unique_indexes(self, oid: int) -> list[tuple[str, str]]: ...

    def foreign_keys(self, oid: int) -> list[tuple[str, str]]: ...

    def referenced_by(self, oid: int) -> list[tuple[str, str, str, str]]: ...


_RESOLVE_TABLE = text("""
    SELECT c.oid, n.nspname, c.relname
    FROM pg_catalog.pg_class c
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    WHERE c.oid = CAST(CAST(:name AS text) AS regclass)
""")

# contype 'c' = CHECK, 'f' = FOREIGN KEY
_CONSTRAINT_COLUMNS = """
    SELECT co.conname, att.attname
    FROM pg_catalog.pg_constraint co
    JOIN LATERAL unnest(co.conkey) WITH ORDINALITY AS k(attnum, ord) ON true
    JOIN pg_catalog.pg_attribute att ON att.attrelid = co.conrelid AND att.attnum = k.attnum
    WHERE co.conrelid = CAST(:oid AS oid) AND co.contype = '{contype}'
    ORDER BY co.conname, k.ord
"""

_CHECK_CONSTRAINTS = text(_CONSTRAINT_COLUMNS.format(contype="c"))
_FOREIGN_KEYS = text(_CONSTRAINT_COLUMNS.format(contype="f"))

# Unique, non-primary, valid indexes without index expressions. Partial indexes are
# kept; INCLUDE columns (past indnkeyatts) are not part of the uniqueness key.
_UNIQUE_INDEXES = text("""
    SELECT ic.relname, att.attname
    FROM pg_catalog.pg_index ix
    JOIN pg_catalog.pg_class ic ON ic.oid = ix.indexrelid
    JOIN LATERAL unnest(ix.indkey::int2[]) WITH ORDINALITY AS k(attnum, ord) ON true
    JOIN pg_catalog.pg_attribute att ON att.attrelid = ix.indrelid AND att.attnum = k.attnum
    WHERE ix.indrelid = CAST(:oid AS oid)
      AND ix.indisunique
      AND NOT ix.indisprimary
      AND ix.indisvalid
      AND ix.indexprs IS NULL
      AND k.ord <= ix.indnkeyatts
    ORDER BY ic.relname, k.ord
""")

# Foreign keys on other tables (or this one) that point at this table; the column
# reported is the referenced column in this table.
_REFERENCED_BY = text("""
    SELECT n.nspname, c.relname, co.conname, att.attname
    FROM pg_catalog.pg_constraint co
    JOIN pg_catalog.pg_class c ON c.oid = co.conrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    JOIN LATERAL unnest(co.confkey) WITH ORDINALITY AS k(attnum, ord) ON true
    JOIN pg_catalog.pg_attribute att ON att.attrelid = co.confrelid AND att.attnum = k.attnum
    WHERE co.confrelid = CAST(:oid AS oid) AND co.contype = 'f'
    ORDER BY n.nspname, c.relname, co.conname, k.ord
""")


class PostgresConstraintCatalog:
    """ConstraintCatalog backed by pg_catalog."""

    def __init__(self, connection: Connection):
        self.connection = connection

    def _quoted_name(self, schema: str | None, table: str) -> str:
        preparer = self.connection.dialect.identifier_preparer
        quoted = preparer.quote_identifier(table)
        if schema:
            quoted = f"{preparer.quote_identifier(schema)}.{quoted}"
        return quoted

    def resolve(self, schema: str | None, table: str) -> CatalogTable:
        """
        Resolve a (possibly unqualified) table name with the connection's search_path.

        Raises:
            LookupError: when the table does not exist.
        """
        row = self.connection.execute(
            _RESOLVE_TABLE, {"name": self._quoted_name(schema, table)}
        ).first()
        if row is None:
            raise LookupError(f"table not found: {self._quoted_name(schema, table)}")
        return CatalogTable(oid=row[0], schema=row[1], table=row[2])

    def check_constraints(self, oid: int) -> list[tuple[str, str]]:
        return [tuple(r) for r in self.connection.execute(_CHECK_CONSTRAINTS, {"oid": oid})]

    def unique_indexes(self, oid: int) -> list[tuple[str, str]]:
        return [tuple(r) for r in self.connection.execute(_UNIQUE_INDEXES, {"oid": oid})]

    def foreign_keys(self, oid: int) -> list[tuple[str, str]]:
        return [tuple(r) for r in self.connection.execute(_FOREIGN_KEYS, {"oid": oid})]

    def referenced_by(self, oid: int) -> list[tuple[str, str, str, str]]:
        return [tuple(r) for r in self.connection.execute(_REFERENCED_BY, {"oid": oid})]
