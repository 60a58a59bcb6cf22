"""
Table binding: the write target together with its constraint metadata snapshot,
message table and optional field splitter.

A binding is built once per table (usually at application start-up) and shared
read-only by every write afterwards. Binding to a different source produces a new
binding; the snapshot itself is never mutated.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from constraint_validations.exceptions.base import ValidationErrors

from .assembler import AssembledOutcome, convert_violation
from .catalog import ConstraintCatalog
from .messages import DEFAULT_ERROR_MESSAGES, MessageTable, build_message_table
from .metadata import TableConstraintMetadata, build_constraint_metadata, split_source

logger = logging.getLogger(__name__)

FieldSplitter = Callable[[ValidationErrors], None]


@dataclass(frozen=True)
class TableBinding:
    source: object
    metadata: TableConstraintMetadata | None = None
    messages: MessageTable = field(default_factory=lambda: DEFAULT_ERROR_MESSAGES)
    field_splitter: FieldSplitter | None = None
    bound: bool = field(default=False, compare=False)

    def __hash__(self):
        return hash((self.source, self.metadata, frozenset(self.messages.items()), self.field_splitter))

    @classmethod
    def for_model(cls, model, *, messages: Mapping[str, str] | None = None,
                  field_splitter: FieldSplitter | None = None) -> "TableBinding":
        """
        Binding for a mapped class. The source is the mapper's local table, which is
        a Subquery (and so never gets metadata) for classes mapped to a select.
        """
        return cls(
            source=sa_inspect(model).local_table,
            messages=build_message_table(messages),
            field_splitter=field_splitter,
        )

    @property
    def name(self) -> str:
        if self.metadata is not None:
            return self.metadata.qualified_name
        names = split_source(self.source)
        if names is None:
            return repr(self.source)
        schema, table = names
        return f"{schema}.{table}" if schema else table

    def bind(self, connection: Connection, *, catalog: ConstraintCatalog | None = None) -> "TableBinding":
        """Return a copy of this binding with a freshly built metadata snapshot."""
        metadata = build_constraint_metadata(connection, self.source, catalog=catalog)
        return replace(self, metadata=metadata, bound=True)

    async def bind_async(self, connectable: AsyncConnection | AsyncEngine) -> "TableBinding":
        """
        Async variant of bind(); accepts an AsyncConnection or an AsyncEngine
        (a connection is checked out for the duration of the introspection).
        """
        if isinstance(connectable, AsyncEngine):
            async with connectable.connect() as connection:
                return await connection.run_sync(self.bind)
        return await connectable.run_sync(self.bind)

    def rebind(self, source) -> "TableBinding":
        """New binding for another source; it has no metadata until bound again."""
        return replace(self, source=source, metadata=None, bound=False)

    def with_messages(self, overrides: Mapping[str, str]) -> "TableBinding":
        """Derived binding sharing this snapshot, with `overrides` merged onto this binding's messages."""
        return replace(self, messages=build_message_table(overrides, base=self.messages))

    def with_field_splitter(self, field_splitter: FieldSplitter | None) -> "TableBinding":
        return replace(self, field_splitter=field_splitter)

    def convert(self, exc: IntegrityError) -> AssembledOutcome:
        if not self.bound:
            logger.debug("binding.unbound", extra={"table": self.name})
        return convert_violation(exc, self.metadata, self.messages)
