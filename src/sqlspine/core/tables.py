"""Whole-table operations: list, read, duplicate, rename, drop."""

from __future__ import annotations

import re

from sqlspine.core.dialect import DialectCatalog, Operation, default_catalog
from sqlspine.core.errors import InvalidInputError
from sqlspine.core.keygen import KeyGenerator
from sqlspine.core.logging import get_logger
from sqlspine.core.protocols import Connection
from sqlspine.core.settings import SqlSpineSettings, get_settings
from sqlspine.core.statements import run
from sqlspine.core.types import DatabaseType, TableRecord
from sqlspine.core.values import TypedValue, normalize, tag

logger = get_logger(__name__)

VALID_TABLE_NAME = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_table_name(name: str) -> str:
    """Return ``name`` if it only holds letters, digits, ``_`` and ``-``."""
    if not VALID_TABLE_NAME.fullmatch(name):
        raise InvalidInputError(
            "table names must contain only letters, numbers, underscores, and dashes",
            field="table",
            value=name,
        )
    return name


class TableOperations:
    """
    Operations on whole tables of one connection.

    Args:
        connection: DB-API connection supplied by the caller
        dialect: Dialect of that connection
        catalog: Dialect catalog to resolve templates from
        keygen: Source of random table-copy suffixes
        settings: Binary decoding policy and commit behaviour
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
        self.keygen = keygen or KeyGenerator(suffix_length=self.settings.table_suffix_length)

    def list_tables(self) -> list[str]:
        plan = self.catalog.render(self.dialect, Operation.LIST_TABLES)
        return [str(row[0]) for row in run(self.connection, plan, fetch=True).rows]

    def _select_all(self, table: str):
        plan = self.catalog.render(self.dialect, Operation.SELECT_ALL, table=table)
        return run(self.connection, plan, fetch=True)

    def list_rows(self, table: str) -> list[TableRecord]:
        """Every row of ``table`` as a column -> normalized value dict.

        Column names come from the driver's result description. Byte values
        are decoded according to ``settings.binary_decoding``.
        """
        result = self._select_all(table)
        policy = self.settings.binary_decoding
        return [
            {column: normalize(value, policy) for column, value in zip(result.columns, row)}
            for row in result.rows
        ]

    def list_typed_rows(self, table: str) -> list[dict[str, TypedValue]]:
        """Like ``list_rows`` but every value is a ``TypedValue``."""
        result = self._select_all(table)
        policy = self.settings.binary_decoding
        return [
            {column: tag(value, policy) for column, value in zip(result.columns, row)}
            for row in result.rows
        ]

    def duplicate_table(self, source: str, target: str = "") -> str:
        """Copy structure and rows of ``source`` into ``target``.

        An empty ``target`` becomes ``<source>-copy-<random letters>``. The two
        statements are not atomic: if the copy fails, the new empty table stays.

        Returns:
            The name of the new table
        """
        if target:
            validate_table_name(target)
        else:
            target = f"{source}-copy-{self.keygen.suffix()}"

        descriptor = self.catalog.descriptor(self.dialect)
        create = descriptor.render(Operation.DUPLICATE_CREATE, source=source, target=target)
        copy = descriptor.render(Operation.DUPLICATE_COPY, source=source, target=target)

        commit = self.settings.commit_each_statement
        run(self.connection, create, commit=commit)
        run(self.connection, copy, commit=commit)

        logger.debug("table_duplicated", dialect=descriptor.name, source=source, target=target)
        return target

    def rename_table(self, source: str, target: str) -> None:
        plan = self.catalog.render(self.dialect, Operation.RENAME_TABLE, source=source, target=target)
        run(self.connection, plan, commit=self.settings.commit_each_statement)

    def drop_table(self, table: str) -> None:
        plan = self.catalog.render(self.dialect, Operation.DROP_TABLE, table=table)
        run(self.connection, plan, commit=self.settings.commit_each_statement)


__all__ = [
    "TableOperations",
    "VALID_TABLE_NAME",
    "validate_table_name",
]
