"""Schema introspection: table existence, columns, column types, primary keys.

Every answer comes from a live metadata query rendered from the dialect
catalog. Nothing is cached, so results always reflect the current schema.
Metadata is scoped to the connection's current database and the default
``public`` / ``dbo`` schema where the dialect has schemas.
"""

from __future__ import annotations

from typing import Any

from sqlspine.core.dialect import DialectCatalog, DialectDescriptor, Operation, default_catalog
from sqlspine.core.errors import ExecutionError, NotFoundError
from sqlspine.core.logging import get_logger
from sqlspine.core.protocols import Connection
from sqlspine.core.statements import StatementPlan, StatementResult, run
from sqlspine.core.types import ColumnList, DatabaseType, PrimaryKeySet

logger = get_logger(__name__)


def is_missing_table_error(descriptor: DialectDescriptor, error: BaseException) -> bool:
    """Whether a driver exception means "relation does not exist" for this dialect."""
    codes = [
        str(code)
        for code in (
            getattr(error, "sqlstate", None),
            getattr(error, "pgcode", None),
            getattr(error, "errno", None),
        )
        if code is not None
    ]
    text = " ".join([str(error), *codes]).lower()
    return any(marker.lower() in text for marker in descriptor.missing_table_markers)


class SchemaIntrospector:
    """
    Answers structural questions about one table at a time.

    Args:
        connection: DB-API connection supplied by the caller
        dialect: Dialect of that connection
        catalog: Dialect catalog to resolve templates from

    Example:
        >>> inspector = SchemaIntrospector(conn, DatabaseType.SQLITE)
        >>> inspector.list_primary_keys("orders")
        ['id']
    """

    def __init__(
        self,
        connection: Connection,
        dialect: DatabaseType | str,
        *,
        catalog: DialectCatalog = default_catalog,
    ):
        self.connection = connection
        self.dialect = dialect
        self.catalog = catalog

    @property
    def descriptor(self) -> DialectDescriptor:
        return self.catalog.descriptor(self.dialect)

    def table_exists(self, table: str) -> bool:
        """Check ``table`` with a select that returns no rows.

        Raises:
            ExecutionError: The check failed for a reason other than an
                unknown relation (permissions, connectivity...)
        """
        descriptor = self.descriptor
        plan = descriptor.render(Operation.TABLE_EXISTS, table=table)
        return self._exists(descriptor, plan)

    def _exists(self, descriptor: DialectDescriptor, plan: StatementPlan) -> bool:
        try:
            run(self.connection, plan, fetch=True)
        except ExecutionError as e:
            if is_missing_table_error(descriptor, e.cause):
                return False
            raise
        return True

    def require_table(self, table: str, *operations: Operation) -> DialectDescriptor:
        """Resolve the descriptor and fail fast with ``NotFoundError`` if ``table`` is missing.

        Templates for ``operations`` are checked before the existence query
        runs, so an incomplete dialect never touches the database.
        """
        descriptor = self.descriptor
        descriptor.require(Operation.TABLE_EXISTS, *operations)
        plan = descriptor.render(Operation.TABLE_EXISTS, table=table)
        if not self._exists(descriptor, plan):
            raise NotFoundError(f"table {table!r} does not exist").with_context(
                dialect=descriptor.name, table=table
            )
        return descriptor

    def _metadata(self, table: str, operation: Operation) -> tuple[DialectDescriptor, StatementResult]:
        descriptor = self.require_table(table, operation)
        result = run(self.connection, descriptor.render(operation, table=table), fetch=True)
        return descriptor, result

    def list_columns(self, table: str) -> ColumnList:
        """Column names of ``table`` in ordinal order."""
        _, result = self._metadata(table, Operation.LIST_COLUMNS)
        return [_first(row) for row in result.rows]

    def column_types(self, table: str) -> dict[str, str]:
        """Declared data type per column, lower-cased."""
        _, result = self._metadata(table, Operation.COLUMN_TYPES)
        return {str(row[0]): str(row[1] or "").lower() for row in result.rows}

    def list_primary_keys(self, table: str) -> PrimaryKeySet:
        """Primary-key columns in key order; empty when none is declared."""
        descriptor, result = self._metadata(table, Operation.PRIMARY_KEYS)

        if descriptor.db_type is DatabaseType.SQLITE:
            keys = _sqlite_primary_keys(result.rows)
        else:
            keys = [_first(row) for row in result.rows]

        logger.debug("primary_keys_listed", dialect=descriptor.name, table=table, count=len(keys))
        return keys


def _first(row: Any) -> str:
    return str(row[0])


def _sqlite_primary_keys(rows: list[Any]) -> PrimaryKeySet:
    """Parse ``(name, pk)`` rows from ``pragma_table_info``."""
    flagged = [(int(row[1]), str(row[0])) for row in rows if row[1]]
    return [name for _, name in sorted(flagged)]


__all__ = [
    "SchemaIntrospector",
    "is_missing_table_error",
]
