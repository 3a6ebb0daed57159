"""Statement plans and the one place statements reach the driver.

A ``StatementPlan`` is SQL text plus its ordered bind arguments. Plans are
built per call and thrown away; nothing here caches or prepares ahead.

``run()`` opens a cursor, executes exactly one plan, collects what the
caller asked for, optionally commits, and closes the cursor. Any driver
exception is wrapped into ``ExecutionError`` carrying the operation name and
the SQL text; the original exception stays chained as ``cause``. A failing
``close()`` is reported the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlspine.core.errors import ExecutionError, SqlSpineError
from sqlspine.core.logging import get_logger
from sqlspine.core.protocols import Connection

logger = get_logger(__name__)


@dataclass(frozen=True)
class StatementPlan:
    """SQL text plus positional bind arguments, in placeholder order."""

    operation: str
    sql: str
    args: tuple[Any, ...] = ()


@dataclass
class StatementResult:
    """What a single execution produced."""

    columns: list[str] = field(default_factory=list)
    rows: list[Any] = field(default_factory=list)
    rowcount: int = -1
    lastrowid: Any = None


def run(
    connection: Connection,
    plan: StatementPlan,
    *,
    fetch: bool = False,
    commit: bool = False,
) -> StatementResult:
    """Execute ``plan`` on a fresh cursor.

    Args:
        connection: DB-API connection supplied by the caller
        plan: Statement to execute
        fetch: Read all result rows
        commit: Call ``connection.commit()`` after a successful execute

    Raises:
        ExecutionError: The driver rejected the statement
    """
    try:
        cursor = connection.cursor()
    except Exception as e:
        raise ExecutionError(plan.operation, e, statement=plan.sql) from e

    try:
        cursor.execute(plan.sql, plan.args)
        description = cursor.description
        result = StatementResult(
            columns=[column[0] for column in description] if description else [],
            rows=list(cursor.fetchall()) if fetch else [],
            rowcount=cursor.rowcount,
            lastrowid=getattr(cursor, "lastrowid", None),
        )
        if commit:
            connection.commit()
    except SqlSpineError:
        _close_after_failure(cursor, plan)
        raise
    except Exception as e:
        _close_after_failure(cursor, plan)
        raise ExecutionError(plan.operation, e, statement=plan.sql) from e

    try:
        cursor.close()
    except Exception as e:
        raise ExecutionError(plan.operation, e, statement=plan.sql) from e

    logger.debug(
        "statement_executed",
        operation=plan.operation,
        rowcount=result.rowcount,
        rows=len(result.rows),
    )
    return result


def _close_after_failure(cursor: Any, plan: StatementPlan) -> None:
    """Close ``cursor`` while another error propagates; that error wins."""
    try:
        cursor.close()
    except Exception as e:
        logger.warning("cursor_close_failed", operation=plan.operation, error=str(e))


__all__ = [
    "StatementPlan",
    "StatementResult",
    "run",
]
