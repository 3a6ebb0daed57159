"""
Dialect catalog: per-database quoting, placeholders and metadata SQL.

Each supported ``DatabaseType`` maps to one immutable ``DialectDescriptor``
holding everything the engine needs to know about that database: how to
quote an identifier, how to spell the N-th bind placeholder, how to
recognise a "table does not exist" error, and the SQL template for every
metadata and table-level ``Operation``. Engine code looks a descriptor up
once per call and never branches on the dialect itself.

Manifesto:
    Record CRUD must produce valid SQL on seven databases without a single
    ``if dialect == ...`` in the engine. Without a catalog, quoting and
    placeholder rules leak into every statement builder and one new
    database means touching all of them.

    - **Data, not branches:** a dialect is a record of values and templates
    - **No silent defaults:** an unknown dialect or operation is an error
    - **Per-statement numbering:** ``$1``/``@p1``/``:1`` restart every statement
    - **Immutable:** descriptors never change; a catalog only swaps whole entries

Architecture::

    ┌──────────────────────────────────────────────────────────────────┐
    │                         DialectCatalog                           │
    │            DatabaseType  →  DialectDescriptor                    │
    └──────────────────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌───────────┐ ┌──────────┐ ┌───────────┐ ┌──────────┐ ┌─────────┐
    │MySQL/Maria│ │PostgreSQL│ │CockroachDB│ │  SQLite  │ │SQLServer│ ...
    │ `t`  ?    │ │ "t"  $1  │ │ "t"  ?    │ │ "t"  ?   │ │"t"  @p1 │
    └───────────┘ └──────────┘ └───────────┘ └──────────┘ └─────────┘

    QueryTemplate.sql format fields:
        {table} {source} {target}              quoted identifiers
        {table_str} {source_str} {target_str}  raw names for '...' literals
        {table_literal}                        quoted identifier for '...' literals
        {p1} .. {pN}                           placeholders for binds[0..N-1]

Examples:
    >>> from sqlspine.core.dialect import get_dialect
    >>> from sqlspine.core.types import DatabaseType
    >>> pg = get_dialect(DatabaseType.POSTGRESQL)
    >>> pg.placeholders(3)
    ['$1', '$2', '$3']
    >>> pg.quote("orders")
    '"orders"'
    >>> pg.render(Operation.LIST_COLUMNS, table="orders").args
    ('orders',)

Guardrails:
    ❌ DON'T: Fall back to another dialect's SQL when a template is missing
    ✅ DO: Raise ``UnsupportedDialectError``

    ❌ DON'T: Format caller values into SQL text
    ✅ DO: Bind them through ``{pN}`` slots

Tags:
    dialect, sql, catalog, placeholders, quoting, introspection, sqlspine

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from sqlspine.core.errors import UnsupportedDialectError
from sqlspine.core.statements import StatementPlan
from sqlspine.core.types import DatabaseType


class Operation(str, Enum):
    """Named SQL templates a dialect may provide."""

    TABLE_EXISTS = "table_exists"
    LIST_TABLES = "list_tables"
    SELECT_ALL = "select_all"
    LIST_COLUMNS = "list_columns"
    COLUMN_TYPES = "column_types"
    PRIMARY_KEYS = "primary_keys"
    DROP_TABLE = "drop_table"
    RENAME_TABLE = "rename_table"
    DUPLICATE_CREATE = "duplicate_create"
    DUPLICATE_COPY = "duplicate_copy"


@dataclass(frozen=True)
class QueryTemplate:
    """SQL text with identifier fields and bind slots.

    ``binds`` names the render-context values bound to ``{p1}``, ``{p2}``...
    in order. A name refers to the raw value (``"table"``) or to its quoted
    identifier form (``"table_quoted"``).
    """

    sql: str
    binds: tuple[str, ...] = ()


def _positional(index: int) -> str:  # noqa: ARG001
    return "?"


def _dollar(index: int) -> str:
    return f"${index}"


def _at_p(index: int) -> str:
    return f"@p{index}"


def _colon(index: int) -> str:
    return f":{index}"


@dataclass(frozen=True)
class DialectDescriptor:
    """Everything the engine knows about one database type.

    Attributes:
        db_type: The dialect this descriptor describes
        quote_char: Character wrapped around identifiers
        placeholder_style: 1-based position -> bind token
        templates: SQL template per ``Operation``
        missing_table_markers: Substrings (messages, SQLSTATEs, vendor codes)
            that identify an unknown-relation error from the driver
    """

    db_type: DatabaseType
    quote_char: str
    placeholder_style: Callable[[int], str]
    templates: Mapping[Operation, QueryTemplate] = field(default_factory=dict)
    missing_table_markers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "templates", MappingProxyType(dict(self.templates)))

    @property
    def name(self) -> str:
        return self.db_type.value

    def quote(self, identifier: str) -> str:
        """Wrap ``identifier`` in the quote char, doubling embedded ones."""
        q = self.quote_char
        return f"{q}{identifier.replace(q, q + q)}{q}"

    def placeholder(self, index: int) -> str:
        """Bind token for the ``index``-th argument of a statement (1-based)."""
        if index < 1:
            raise ValueError(f"placeholder positions start at 1, got {index}")
        return self.placeholder_style(index)

    def placeholders(self, count: int, start: int = 1) -> list[str]:
        """Tokens for ``count`` consecutive arguments starting at ``start``."""
        return [self.placeholder(i) for i in range(start, start + count)]

    def template(self, operation: Operation) -> QueryTemplate:
        try:
            return self.templates[operation]
        except KeyError:
            raise UnsupportedDialectError(
                f"{self.name} has no template for {operation.value}",
            ).with_context(dialect=self.name, operation=operation.value) from None

    def require(self, *operations: Operation) -> None:
        """Fail with ``UnsupportedDialectError`` unless every operation has a template.

        Multi-statement calls check everything they may run before running any.
        """
        for operation in operations:
            self.template(operation)

    def render(self, operation: Operation, **identifiers: str) -> StatementPlan:
        """Fill ``operation``'s template for the given table identifiers.

        Usage:
            plan = descriptor.render(Operation.RENAME_TABLE, source="a", target="b")
        """
        template = self.template(operation)

        fields: dict[str, str] = {}
        values: dict[str, Any] = {}
        for key, name in identifiers.items():
            fields[key] = self.quote(name)
            fields[f"{key}_str"] = name.replace("'", "''")
            fields[f"{key}_literal"] = self.quote(name).replace("'", "''")
            values[key] = name
            values[f"{key}_quoted"] = self.quote(name)

        args = []
        for position, bind in enumerate(template.binds, start=1):
            fields[f"p{position}"] = self.placeholder(position)
            args.append(values[bind])

        return StatementPlan(
            operation=operation.value,
            sql=template.sql.format(**fields),
            args=tuple(args),
        )


# =========================================================================
# Templates
# =========================================================================

_COMMON: dict[Operation, QueryTemplate] = {
    Operation.TABLE_EXISTS: QueryTemplate("SELECT 1 FROM {table} WHERE 1 = 0"),
    Operation.SELECT_ALL: QueryTemplate("SELECT * FROM {table}"),
    Operation.DROP_TABLE: QueryTemplate("DROP TABLE {table}"),
    Operation.RENAME_TABLE: QueryTemplate("ALTER TABLE {source} RENAME TO {target}"),
    Operation.DUPLICATE_CREATE: QueryTemplate(
        "CREATE TABLE {target} AS SELECT * FROM {source} WHERE 1 = 0"
    ),
    Operation.DUPLICATE_COPY: QueryTemplate("INSERT INTO {target} SELECT * FROM {source}"),
}


def _information_schema_columns(scope: str) -> dict[Operation, QueryTemplate]:
    """LIST_COLUMNS / COLUMN_TYPES over INFORMATION_SCHEMA.COLUMNS for ``scope``."""
    where = f"WHERE TABLE_NAME = {{p1}} AND {scope} ORDER BY ORDINAL_POSITION"
    return {
        Operation.LIST_COLUMNS: QueryTemplate(
            f"SELECT COLUMN_NAME FROM INFORMATION_SCHEMA.COLUMNS {where}", ("table",)
        ),
        Operation.COLUMN_TYPES: QueryTemplate(
            f"SELECT COLUMN_NAME, DATA_TYPE FROM INFORMATION_SCHEMA.COLUMNS {where}", ("table",)
        ),
    }


def _constraint_join_primary_keys(catalog: str, schema: str) -> QueryTemplate:
    return QueryTemplate(
        "SELECT kcu.COLUMN_NAME "
        "FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS AS tc "
        "JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE AS kcu "
        "ON kcu.CONSTRAINT_CATALOG = tc.CONSTRAINT_CATALOG "
        "AND kcu.CONSTRAINT_SCHEMA = tc.CONSTRAINT_SCHEMA "
        "AND kcu.CONSTRAINT_NAME = tc.CONSTRAINT_NAME "
        "AND kcu.TABLE_NAME = tc.TABLE_NAME "
        "WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY' "
        f"AND tc.TABLE_CATALOG = {catalog} AND tc.TABLE_SCHEMA = '{schema}' "
        "AND tc.TABLE_NAME = {p1} "
        "ORDER BY kcu.ORDINAL_POSITION",
        ("table",),
    )


_MYSQL_TEMPLATES = {
    **_COMMON,
    **_information_schema_columns("TABLE_SCHEMA = DATABASE()"),
    Operation.LIST_TABLES: QueryTemplate(
        "SELECT table_name FROM information_schema.tables WHERE table_schema = DATABASE()"
    ),
    Operation.PRIMARY_KEYS: QueryTemplate(
        "SELECT COLUMN_NAME FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE "
        "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = {p1} "
        "AND CONSTRAINT_NAME = 'PRIMARY' ORDER BY ORDINAL_POSITION",
        ("table",),
    ),
    Operation.RENAME_TABLE: QueryTemplate("RENAME TABLE {source} TO {target}"),
    Operation.DUPLICATE_CREATE: QueryTemplate("CREATE TABLE {target} LIKE {source}"),
}

_POSTGRES_TEMPLATES = {
    **_COMMON,
    **_information_schema_columns("TABLE_SCHEMA = 'public'"),
    Operation.LIST_TABLES: QueryTemplate(
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_catalog = current_database() AND table_schema = 'public'"
    ),
    Operation.PRIMARY_KEYS: QueryTemplate(
        "SELECT a.attname AS column_name FROM pg_constraint AS c "
        "JOIN pg_attribute AS a ON a.attnum = ANY(c.conkey) AND a.attrelid = c.conrelid "
        "WHERE c.contype = 'p' AND c.conrelid = {p1}::regclass "
        "ORDER BY array_position(c.conkey, a.attnum)",
        ("table_quoted",),
    ),
    Operation.DUPLICATE_CREATE: QueryTemplate(
        "CREATE TABLE {target} (LIKE {source} INCLUDING ALL)"
    ),
}

_COCKROACH_TEMPLATES = {
    **_POSTGRES_TEMPLATES,
    Operation.SELECT_ALL: QueryTemplate('SELECT * FROM "public".{table}'),
    Operation.PRIMARY_KEYS: _constraint_join_primary_keys("current_database()", "public"),
}

_SQLITE_TEMPLATES = {
    **_COMMON,
    Operation.LIST_TABLES: QueryTemplate(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
    ),
    Operation.LIST_COLUMNS: QueryTemplate(
        "SELECT name FROM pragma_table_info({p1}) ORDER BY cid", ("table",)
    ),
    Operation.COLUMN_TYPES: QueryTemplate(
        "SELECT name, type FROM pragma_table_info({p1}) ORDER BY cid", ("table",)
    ),
    # pk is 0 for non-key columns, else the column's 1-based position in the key
    Operation.PRIMARY_KEYS: QueryTemplate(
        "SELECT name, pk FROM pragma_table_info({p1}) ORDER BY cid", ("table",)
    ),
}

_SQLSERVER_TEMPLATES = {
    **_COMMON,
    **_information_schema_columns("TABLE_SCHEMA = 'dbo'"),
    Operation.LIST_TABLES: QueryTemplate(
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_catalog = DB_NAME() AND table_schema = 'dbo'"
    ),
    Operation.SELECT_ALL: QueryTemplate("SELECT * FROM dbo.{table}"),
    Operation.PRIMARY_KEYS: _constraint_join_primary_keys("DB_NAME()", "dbo"),
    Operation.RENAME_TABLE: QueryTemplate("EXEC sp_rename '{source_str}', '{target_str}'"),
    Operation.DUPLICATE_CREATE: QueryTemplate(
        "SELECT * INTO {target} FROM {source} WHERE 1 = 0"
    ),
}

_ORACLE_TEMPLATES = {
    **_COMMON,
    Operation.LIST_TABLES: QueryTemplate(
        "SELECT table_name FROM all_tables WHERE owner = USER"
    ),
    Operation.LIST_COLUMNS: QueryTemplate(
        "SELECT COLUMN_NAME FROM ALL_TAB_COLUMNS "
        "WHERE TABLE_NAME = {p1} AND OWNER = USER ORDER BY COLUMN_ID",
        ("table",),
    ),
    Operation.COLUMN_TYPES: QueryTemplate(
        "SELECT COLUMN_NAME, DATA_TYPE FROM ALL_TAB_COLUMNS "
        "WHERE TABLE_NAME = {p1} AND OWNER = USER ORDER BY COLUMN_ID",
        ("table",),
    ),
    Operation.PRIMARY_KEYS: QueryTemplate(
        "SELECT cols.COLUMN_NAME FROM ALL_CONSTRAINTS cons "
        "JOIN ALL_CONS_COLUMNS cols "
        "ON cols.CONSTRAINT_NAME = cons.CONSTRAINT_NAME AND cols.OWNER = cons.OWNER "
        "WHERE cons.CONSTRAINT_TYPE = 'P' AND cons.TABLE_NAME = {p1} "
        "AND cons.OWNER = USER ORDER BY cols.POSITION",
        ("table",),
    ),
    # ORA-00942 (table or view does not exist) is a no-op, anything else re-raises
    Operation.DROP_TABLE: QueryTemplate(
        "BEGIN EXECUTE IMMEDIATE 'DROP TABLE {table_literal}'; "
        "EXCEPTION WHEN OTHERS THEN IF SQLCODE != -942 THEN RAISE; END IF; END;"
    ),
}

_MYSQL_MISSING = ("1146", "doesn't exist")
_POSTGRES_MISSING = ("42P01", "does not exist")


# =========================================================================
# Registry / Factory
# =========================================================================

DEFAULT_DESCRIPTORS: Mapping[DatabaseType, DialectDescriptor] = MappingProxyType(
    {
        DatabaseType.MYSQL: DialectDescriptor(
            DatabaseType.MYSQL, "`", _positional, _MYSQL_TEMPLATES, _MYSQL_MISSING
        ),
        DatabaseType.MARIADB: DialectDescriptor(
            DatabaseType.MARIADB, "`", _positional, _MYSQL_TEMPLATES, _MYSQL_MISSING
        ),
        DatabaseType.POSTGRESQL: DialectDescriptor(
            DatabaseType.POSTGRESQL, '"', _dollar, _POSTGRES_TEMPLATES, _POSTGRES_MISSING
        ),
        DatabaseType.COCKROACHDB: DialectDescriptor(
            DatabaseType.COCKROACHDB, '"', _positional, _COCKROACH_TEMPLATES, _POSTGRES_MISSING
        ),
        DatabaseType.SQLITE: DialectDescriptor(
            DatabaseType.SQLITE, '"', _positional, _SQLITE_TEMPLATES, ("no such table",)
        ),
        DatabaseType.SQLSERVER: DialectDescriptor(
            DatabaseType.SQLSERVER, '"', _at_p, _SQLSERVER_TEMPLATES,
            ("42S02", "Invalid object name"),
        ),
        DatabaseType.ORACLE: DialectDescriptor(
            DatabaseType.ORACLE, '"', _colon, _ORACLE_TEMPLATES, ("ORA-00942",)
        ),
    }
)


class DialectCatalog:
    """
    Read-only lookup from ``DatabaseType`` to ``DialectDescriptor``.

    The default catalog covers all seven dialects. Narrower or customised
    catalogs (a driver with a different paramstyle, a test double) are new
    instances via ``with_descriptor()``; ``register()`` swaps an entry at start-up.
    """

    def __init__(self, descriptors: Mapping[DatabaseType, DialectDescriptor] | None = None):
        source = DEFAULT_DESCRIPTORS if descriptors is None else descriptors
        self._descriptors: Mapping[DatabaseType, DialectDescriptor] = MappingProxyType(
            dict(source)
        )

    def descriptor(self, dialect: DatabaseType | str) -> DialectDescriptor:
        """Resolve ``dialect`` or raise ``UnsupportedDialectError``."""
        db_type = DatabaseType.parse(dialect)
        try:
            return self._descriptors[db_type]
        except KeyError:
            raise UnsupportedDialectError(
                f"Unsupported database type: {db_type.value}",
            ).with_context(dialect=db_type.value) from None

    def quote(self, dialect: DatabaseType | str, identifier: str) -> str:
        return self.descriptor(dialect).quote(identifier)

    def placeholder(self, dialect: DatabaseType | str, index: int) -> str:
        return self.descriptor(dialect).placeholder(index)

    def template(self, dialect: DatabaseType | str, operation: Operation) -> QueryTemplate:
        return self.descriptor(dialect).template(operation)

    def render(
        self, dialect: DatabaseType | str, operation: Operation, **identifiers: str
    ) -> StatementPlan:
        return self.descriptor(dialect).render(operation, **identifiers)

    def with_descriptor(self, descriptor: DialectDescriptor) -> DialectCatalog:
        """New catalog with ``descriptor`` added or replacing its dialect's entry."""
        return DialectCatalog({**self._descriptors, descriptor.db_type: descriptor})

    def register(self, descriptor: DialectDescriptor) -> None:
        """Swap in ``descriptor`` for its dialect on this catalog.

        The lookup table is replaced as a whole, never edited in place.
        Meant for start-up configuration, not for use while statements run.
        """
        self._descriptors = MappingProxyType(
            {**self._descriptors, descriptor.db_type: descriptor}
        )

    def supported(self) -> list[DatabaseType]:
        return [db_type for db_type in DatabaseType if db_type in self._descriptors]

    def __contains__(self, dialect: object) -> bool:
        return dialect in self._descriptors


default_catalog = DialectCatalog()


def get_dialect(dialect: DatabaseType | str) -> DialectDescriptor:
    """Get a descriptor from the default catalog.

    Raises:
        UnsupportedDialectError: If ``dialect`` is not recognised.

    Example:
        >>> get_dialect("oracle").placeholders(2)
        [':1', ':2']
    """
    return default_catalog.descriptor(dialect)


def register_dialect(descriptor: DialectDescriptor) -> None:
    """Replace the default catalog's descriptor for ``descriptor.db_type``.

    Useful for drivers whose paramstyle differs from the built-in tokens,
    e.g. psycopg's ``%s`` instead of ``$1``.

    Args:
        descriptor: Descriptor to install
    """
    default_catalog.register(descriptor)


__all__ = [
    "DEFAULT_DESCRIPTORS",
    "DialectCatalog",
    "DialectDescriptor",
    "Operation",
    "QueryTemplate",
    "default_catalog",
    "get_dialect",
    "register_dialect",
]
