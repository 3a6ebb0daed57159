"""
Structural protocols for the database handles sqlspine accepts.

sqlspine never opens connections. It works against any object shaped like a
DB-API 2.0 connection: ``sqlite3``, ``psycopg``, ``oracledb``,
``mysql.connector``, ``pyodbc`` and test doubles all qualify.

Architecture:
    ::

        Connection Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ cursor()    → new Cursor                               │
        │ commit()    → commit current transaction               │
        │ rollback()  → roll back current transaction            │
        └────────────────────────────────────────────────────────┘

        Cursor Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ execute(sql, params)  → run one statement              │
        │ fetchall()            → remaining result rows          │
        │ description           → result column metadata         │
        │ rowcount / lastrowid  → mutation results               │
        │ close()                                                │
        └────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Add driver-specific methods here
    ✅ DO: Keep protocols pure contracts
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """Minimal DB-API cursor."""

    description: Sequence[Sequence[Any]] | None
    rowcount: int
    lastrowid: Any

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute one statement with positional parameters."""
        ...

    def fetchall(self) -> list:
        """Fetch all remaining rows."""
        ...

    def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Minimal DB-API connection."""

    def cursor(self) -> Cursor:
        """Open a new cursor."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...


__all__ = [
    "Connection",
    "Cursor",
]
