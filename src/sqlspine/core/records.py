"""
Generic record engine: insert, update, delete and duplicate untyped rows.

A record is a plain ``dict`` from column name to value. The engine splits it
once into parallel column/value lists, numbers one placeholder per value,
and binds the values in exactly that order. Deletes and duplicates ask the
``SchemaIntrospector`` for the table's primary key first, so a delete hits
one row by key whenever the table has one.

Manifesto:
    Callers know a table name and a dialect, nothing more. The engine turns
    "remove this record" into the smallest statement that does it safely on
    whichever database the connection points at.

    - **Key first:** delete by primary key when one exists
    - **Loud misses:** zero rows affected is ``NotFoundError``, not success
    - **No retries:** a key collision on duplicate surfaces as-is
    - **Dialect first:** unsupported dialects fail before any SQL is built

Architecture::

    record ──► split ──► columns [c1, c2]   values [v1, v2]
                              │                   │
                              ▼                   ▼
        INSERT INTO "t" (c1, c2) VALUES (<p1>, <p2>)   args (v1, v2)

    UPDATE "t" SET col = <p1> WHERE k1 = <p2> AND k2 = <p3>
    DELETE FROM "t" WHERE "pk" = <p1>

Examples:
    >>> engine = RecordEngine(conn, DatabaseType.SQLITE)
    >>> engine.insert("users", {"id": 1, "name": "ada"})
    1
    >>> engine.update_by_id("users", "id", 1, "name", "grace")
    1
    >>> engine.delete("users", {"id": 1, "name": "grace"})
    1

Guardrails:
    ❌ DON'T: Treat an empty filter as "match everything"
    ✅ DO: Raise ``InvalidInputError``

    ❌ DON'T: Retry duplicate() on a uniqueness violation
    ✅ DO: Let the ``ExecutionError`` reach the caller

Tags:
    crud, generic-record, primary-key, placeholders, sqlspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlspine.core.dialect import DialectCatalog, DialectDescriptor, Operation, default_catalog
from sqlspine.core.errors import InvalidInputError, NotFoundError
from sqlspine.core.introspection import SchemaIntrospector
from sqlspine.core.keygen import KeyGenerator
from sqlspine.core.logging import get_logger
from sqlspine.core.protocols import Connection
from sqlspine.core.settings import SqlSpineSettings, get_settings
from sqlspine.core.statements import StatementPlan, run
from sqlspine.core.types import DatabaseType, TableRecord

logger = get_logger(__name__)


def split_record(record: TableRecord) -> tuple[list[str], list[Any]]:
    """Split ``record`` into parallel column and value lists (one pass)."""
    columns: list[str] = []
    values: list[Any] = []
    for column, value in record.items():
        columns.append(column)
        values.append(value)
    return columns, values


def equality_conditions(
    descriptor: DialectDescriptor, columns: Sequence[str], start: int = 1
) -> str:
    """``a = <p{start}> AND b = <p{start+1}> ...`` for ``columns``."""
    tokens = descriptor.placeholders(len(columns), start=start)
    return " AND ".join(f"{column} = {token}" for column, token in zip(columns, tokens))


def build_insert(descriptor: DialectDescriptor, table: str, record: TableRecord) -> StatementPlan:
    if not record:
        raise InvalidInputError("cannot insert an empty record", field="record").with_context(
            operation="insert", dialect=descriptor.name, table=table
        )
    columns, values = split_record(record)
    placeholders = ", ".join(descriptor.placeholders(len(values)))
    sql = (
        f"INSERT INTO {descriptor.quote(table)} ({', '.join(columns)}) "
        f"VALUES ({placeholders})"
    )
    return StatementPlan("insert", sql, tuple(values))


def build_update(
    descriptor: DialectDescriptor,
    table: str,
    record: TableRecord,
    update_column: str,
    update_value: Any,
) -> StatementPlan:
    if not record:
        raise InvalidInputError(
            "update needs at least one filter column", field="record"
        ).with_context(operation="update", dialect=descriptor.name, table=table)
    columns, values = split_record(record)
    sql = (
        f"UPDATE {descriptor.quote(table)} SET {update_column} = {descriptor.placeholder(1)} "
        f"WHERE {equality_conditions(descriptor, columns, start=2)}"
    )
    return StatementPlan("update", sql, (update_value, *values))


def build_delete(descriptor: DialectDescriptor, table: str, filters: TableRecord, *, quote_columns: bool) -> StatementPlan:
    """``DELETE`` constrained by every pair in ``filters``.

    Key columns come from metadata and are quoted; caller-supplied columns
    are emitted as given.
    """
    columns, values = split_record(filters)
    if quote_columns:
        columns = [descriptor.quote(column) for column in columns]
    sql = f"DELETE FROM {descriptor.quote(table)} WHERE {equality_conditions(descriptor, columns)}"
    return StatementPlan("delete", sql, tuple(values))


class RecordEngine:
    """
    Insert, update, delete and duplicate generic records in one table.

    Args:
        connection: DB-API connection supplied by the caller
        dialect: Dialect of that connection
        catalog: Dialect catalog to resolve descriptors from
        keygen: Source of replacement key values for ``duplicate()``
        settings: Engine settings (commit behaviour, delete key policy)
    """

    def __init__(
        self,
        connection: Connection,
        dialect: DatabaseType | str,
        *,
        catalog: DialectCatalog = default_catalog,
        keygen: KeyGenerator | None = None,
        settings: SqlSpineSettings | None = None,
    ):
        self.connection = connection
        self.dialect = dialect
        self.catalog = catalog
        self.settings = settings or get_settings()
        self.keygen = keygen or KeyGenerator(
            integer_ceiling=self.settings.duplicate_integer_ceiling,
            string_length=self.settings.duplicate_string_length,
            suffix_length=self.settings.table_suffix_length,
        )
        self.introspector = SchemaIntrospector(connection, dialect, catalog=catalog)

    def _execute(self, plan: StatementPlan, descriptor: DialectDescriptor, table: str):
        result = run(self.connection, plan, commit=self.settings.commit_each_statement)
        logger.debug(
            "record_statement",
            operation=plan.operation,
            dialect=descriptor.name,
            table=table,
            rowcount=result.rowcount,
        )
        return result

    def _require_rows(self, rowcount: int, plan: StatementPlan, descriptor: DialectDescriptor, table: str) -> int:
        if rowcount == 0:
            message = "no rows were updated" if plan.operation == "update" else "record does not exist"
            raise NotFoundError(message).with_context(
                operation=plan.operation, dialect=descriptor.name, table=table, statement=plan.sql
            )
        return rowcount

    def insert(self, table: str, record: TableRecord) -> int | None:
        """Insert ``record`` and return the driver's generated id (``lastrowid``).

        Raises:
            InvalidInputError: ``record`` is empty
            ExecutionError: The database rejected the insert
        """
        descriptor = self.catalog.descriptor(self.dialect)
        plan = build_insert(descriptor, table, record)
        return self._execute(plan, descriptor, table).lastrowid

    def update(
        self,
        table: str,
        record: TableRecord,
        update_column: str,
        update_value: Any,
    ) -> int:
        """Set ``update_column`` on every row matching all pairs in ``record``.

        Returns:
            Number of rows affected

        Raises:
            InvalidInputError: ``record`` is empty
            NotFoundError: No row matched
        """
        descriptor = self.catalog.descriptor(self.dialect)
        plan = build_update(descriptor, table, record, update_column, update_value)
        result = self._execute(plan, descriptor, table)
        return self._require_rows(result.rowcount, plan, descriptor, table)

    def update_by_id(
        self,
        table: str,
        id_column: str,
        id_value: Any,
        update_column: str,
        update_value: Any,
    ) -> int:
        """Set ``update_column`` on the row(s) where ``id_column = id_value``."""
        return self.update(table, {id_column: id_value}, update_column, update_value)

    def delete(
        self,
        table: str,
        record: TableRecord | None = None,
        *,
        values: Sequence[Any] | None = None,
    ) -> int:
        """Delete the row identified by ``record`` or by positional ``values``.

        With a primary key, only the first key column constrains the delete
        (every key column when ``delete_by_all_primary_keys`` is set). The key
        value is read from ``record``, or from ``values`` aligned against the
        table's columns. Without a primary key, every supplied pair is matched.

        Returns:
            Number of rows affected

        Raises:
            InvalidInputError: No filter, missing key value, or
                ``len(values) != len(columns)``
            NotFoundError: No row matched
        """
        descriptor = self.catalog.descriptor(self.dialect)
        if (record is None) == (values is None):
            raise InvalidInputError(
                "delete takes exactly one of record or values"
            ).with_context(operation="delete", dialect=descriptor.name, table=table)

        metadata = [Operation.TABLE_EXISTS, Operation.PRIMARY_KEYS]
        if values is not None:
            metadata.append(Operation.LIST_COLUMNS)
        descriptor.require(*metadata)

        primary_keys = self.introspector.list_primary_keys(table)
        supplied = dict(record) if record is not None else self._align_values(table, values, descriptor)

        if primary_keys:
            key_columns = primary_keys if self.settings.delete_by_all_primary_keys else primary_keys[:1]
            filters = {}
            for key in key_columns:
                if key not in supplied:
                    raise InvalidInputError(
                        "primary key not provided", field=key
                    ).with_context(operation="delete", dialect=descriptor.name, table=table)
                filters[key] = supplied[key]
            plan = build_delete(descriptor, table, filters, quote_columns=True)
        else:
            if not supplied:
                raise InvalidInputError(
                    "delete needs at least one filter column", field="record"
                ).with_context(operation="delete", dialect=descriptor.name, table=table)
            plan = build_delete(descriptor, table, supplied, quote_columns=False)

        result = self._execute(plan, descriptor, table)
        return self._require_rows(result.rowcount, plan, descriptor, table)

    def _align_values(
        self, table: str, values: Sequence[Any], descriptor: DialectDescriptor
    ) -> TableRecord:
        columns = self.introspector.list_columns(table)
        if len(values) != len(columns):
            raise InvalidInputError(
                f"expected {len(columns)} values for {len(columns)} columns, got {len(values)}",
                field="values",
                value=len(values),
            ).with_context(operation="delete", dialect=descriptor.name, table=table)
        return dict(zip(columns, values))

    def duplicate(self, table: str, record: TableRecord) -> int | None:
        """Insert a copy of ``record`` with freshly generated primary-key values.

        Integer keys get a random integer, string keys a random alphanumeric
        string, keys of any other type ``None``. ``record`` itself is left
        untouched. A collision with an existing key is not retried.

        Raises:
            ExecutionError: The insert was rejected (e.g. uniqueness violation)
        """
        descriptor = self.catalog.descriptor(self.dialect)
        descriptor.require(Operation.TABLE_EXISTS, Operation.PRIMARY_KEYS, Operation.COLUMN_TYPES)
        primary_keys = self.introspector.list_primary_keys(table)
        column_types = self.introspector.column_types(table) if primary_keys else {}

        copy = dict(record)
        for key in primary_keys:
            declared = column_types.get(key)
            copy[key] = self.keygen.for_type(declared)
            if copy[key] is not None:
                logger.debug(
                    "primary_key_regenerated",
                    dialect=descriptor.name,
                    table=table,
                    column=key,
                    declared_type=declared,
                )
            else:
                logger.warning(
                    "unsupported_key_type_for_duplication",
                    dialect=descriptor.name,
                    table=table,
                    column=key,
                    declared_type=declared,
                )

        return self.insert(table, copy)


__all__ = [
    "RecordEngine",
    "build_delete",
    "build_insert",
    "build_update",
    "equality_conditions",
    "split_record",
]
