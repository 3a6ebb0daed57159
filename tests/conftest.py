"""
Shared pytest fixtures for sqlspine tests.

This module provides:
- A real in-memory sqlite3 connection with a small schema
- A scripted DB-API double for dialects without a local server
- Seeded key generators and explicit settings objects
"""

from __future__ import annotations

import random
import sqlite3
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest

from sqlspine.core.keygen import KeyGenerator
from sqlspine.core.settings import SqlSpineSettings, get_settings


# =========================================================================
# Scripted DB-API double
# =========================================================================


@dataclass
class Reply:
    """What the fake cursor answers for statements containing ``match``."""

    match: str
    rows: list[Any] = field(default_factory=list)
    rowcount: int = 1
    description: list[tuple] | None = None
    lastrowid: Any = None
    error: Exception | None = None
    close_error: Exception | None = None


class FakeCursor:
    def __init__(self, connection: FakeConnection):
        self._connection = connection
        self._rows: list[Any] = []
        self.description = None
        self.rowcount = -1
        self.lastrowid = None
        self.closed = False
        self._reply: Reply | None = None

    def execute(self, sql: str, params=()):
        self._connection.executed.append((sql, tuple(params)))
        reply = self._connection.reply_for(sql)
        self._reply = reply
        if reply.error is not None:
            raise reply.error
        self._rows = list(reply.rows)
        self.description = reply.description
        self.rowcount = reply.rowcount
        self.lastrowid = reply.lastrowid

    def fetchall(self):
        return self._rows

    def close(self):
        self.closed = True
        if self._reply is not None and self._reply.close_error is not None:
            raise self._reply.close_error


class FakeConnection:
    """Records every statement and answers from a list of ``Reply`` rules.

    The first rule whose ``match`` is a substring of the SQL wins. Statements
    matching no rule succeed with no rows and ``rowcount == 1``.
    """

    def __init__(self, replies: list[Reply] | None = None):
        self.replies = list(replies or [])
        self.executed: list[tuple[str, tuple]] = []
        self.commits = 0
        self.rollbacks = 0
        self.cursors: list[FakeCursor] = []

    def reply_for(self, sql: str) -> Reply:
        for reply in self.replies:
            if reply.match in sql:
                return reply
        return Reply(match="")

    def cursor(self) -> FakeCursor:
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    @property
    def statements(self) -> list[str]:
        return [sql for sql, _ in self.executed]


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


# =========================================================================
# sqlite3
# =========================================================================


SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT
);
CREATE TABLE tags (
    code VARCHAR(16) PRIMARY KEY,
    label TEXT
);
CREATE TABLE memberships (
    group_id INTEGER,
    user_id INTEGER,
    role TEXT,
    PRIMARY KEY (user_id, group_id)
);
CREATE TABLE events (
    a INTEGER,
    b INTEGER
);
"""


@pytest.fixture
def sqlite_connection() -> Iterator[sqlite3.Connection]:
    """In-memory sqlite3 database with the test schema."""
    connection = sqlite3.connect(":memory:")
    connection.executescript(SCHEMA)
    connection.commit()
    yield connection
    connection.close()


# =========================================================================
# Randomness and settings
# =========================================================================


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def keygen(rng: random.Random) -> KeyGenerator:
    return KeyGenerator(rng)


@pytest.fixture
def settings() -> SqlSpineSettings:
    """Explicit defaults, independent of the environment and any .env file."""
    return SqlSpineSettings(_env_file=None)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
