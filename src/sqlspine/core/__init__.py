"""sqlspine core -- dialect catalog and generic record engine.

Manifesto:
    Given a DB-API connection, a dialect and a table name, read and write
    rows without knowing the table's shape in advance. Dialect differences
    live in one catalog of plain data; the engine on top is dialect-blind.

Architecture::

    Layer 1 -- Types & Errors
        types.py           DatabaseType, TableRecord, ColumnList, PrimaryKeySet
        errors.py          SqlSpineError hierarchy
        protocols.py       DB-API Connection / Cursor protocols
        values.py          Value normalization, TypedValue, binary decoding
        keygen.py          Explicit random source for keys and suffixes

    Layer 2 -- Dialects & Statements
        dialect.py         DialectCatalog: quoting, placeholders, templates
        statements.py      StatementPlan + single-statement execution

    Layer 3 -- Operations
        introspection.py   SchemaIntrospector (exists, columns, types, keys)
        records.py         RecordEngine (insert, update, delete, duplicate)
        tables.py          TableOperations (list, rows, duplicate, rename, drop)

    Ambient
        settings.py        SqlSpineSettings (pydantic-settings)
        logging.py         structlog configuration

Tags:
    sqlspine, dialect, crud, introspection, generic-record
"""

from sqlspine.core.dialect import (
    DialectCatalog,
    DialectDescriptor,
    Operation,
    QueryTemplate,
    default_catalog,
    get_dialect,
    register_dialect,
)
from sqlspine.core.errors import (
    ErrorCategory,
    ErrorContext,
    ExecutionError,
    InvalidInputError,
    NotFoundError,
    SqlSpineError,
    UnsupportedDialectError,
)
from sqlspine.core.introspection import SchemaIntrospector
from sqlspine.core.keygen import KeyGenerator
from sqlspine.core.protocols import Connection, Cursor
from sqlspine.core.records import RecordEngine
from sqlspine.core.settings import SqlSpineSettings, get_settings
from sqlspine.core.statements import StatementPlan
from sqlspine.core.tables import TableOperations
from sqlspine.core.types import ColumnList, DatabaseType, PrimaryKeySet, TableRecord
from sqlspine.core.values import BinaryDecoding, TypedValue, ValueKind

__all__ = [
    # Types
    "ColumnList",
    "DatabaseType",
    "PrimaryKeySet",
    "TableRecord",
    "TypedValue",
    "ValueKind",
    "BinaryDecoding",
    # Protocols
    "Connection",
    "Cursor",
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "ExecutionError",
    "InvalidInputError",
    "NotFoundError",
    "SqlSpineError",
    "UnsupportedDialectError",
    # Dialects
    "DialectCatalog",
    "DialectDescriptor",
    "Operation",
    "QueryTemplate",
    "StatementPlan",
    "default_catalog",
    "get_dialect",
    "register_dialect",
    # Operations
    "KeyGenerator",
    "RecordEngine",
    "SchemaIntrospector",
    "TableOperations",
    # Settings
    "SqlSpineSettings",
    "get_settings",
]
