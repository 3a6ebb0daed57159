"""Database types and generic record aliases."""

from __future__ import annotations

from enum import Enum
from typing import Any

from sqlspine.core.errors import UnsupportedDialectError

# Column name -> scalar value. Key order carries no meaning.
TableRecord = dict[str, Any]

# Column names in ordinal order, as reported by the database metadata.
ColumnList = list[str]

# Primary-key column names in key ordinal order. May be empty.
PrimaryKeySet = list[str]


class DatabaseType(str, Enum):
    """Supported SQL dialects."""

    MYSQL = "mysql"
    MARIADB = "mariadb"
    POSTGRESQL = "postgres"
    SQLITE = "sqlite3"
    SQLSERVER = "sqlserver"
    ORACLE = "oracle"
    COCKROACHDB = "cockroachdb"

    @classmethod
    def parse(cls, name: DatabaseType | str) -> DatabaseType:
        """
        Resolve a dialect from its value or a common alias.

        Usage:
            DatabaseType.parse("postgresql")  # DatabaseType.POSTGRESQL
            DatabaseType.parse("sqlite")      # DatabaseType.SQLITE
        """
        if isinstance(name, DatabaseType):
            return name
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedDialectError(
                f"Unsupported database type: {name!r}",
            ).with_context(dialect=name) from None


_ALIASES = {
    "postgresql": "postgres",
    "pg": "postgres",
    "sqlite": "sqlite3",
    "mssql": "sqlserver",
    "cockroach": "cockroachdb",
}


__all__ = [
    "ColumnList",
    "DatabaseType",
    "PrimaryKeySet",
    "TableRecord",
]
