"""SQLite connection adapter.

Wraps the standard library :mod:`sqlite3` driver to satisfy
:class:`~unitwork.core.protocols.AsyncConnection` without SQLAlchemy.
``sqlite3`` understands the ``:p0`` named placeholders the command builder
renders, so statements are executed as-is.

Each ``open()`` creates a fresh ``sqlite3`` connection, so point it at a
file: an ``:memory:`` database would be empty on every open.

Usage::

    from unitwork.adapters.sqlite import SqliteConnection

    conn = SqliteConnection("people.db")
    uow = UnitOfWork(conn)
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Mapping
from typing import Any

from unitwork.core.errors import ConfigurationError
from unitwork.orm.command import SqlCommand


class SqliteConnection:
    """Adapter: ``sqlite3`` → ``AsyncConnection`` protocol."""

    def __init__(self, path: str, *, timeout: float = 5.0) -> None:
        if not path:
            raise ConfigurationError("path cannot be empty")
        self.path = path
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> None:
        if self._conn is None:
            self._conn = await asyncio.to_thread(self._connect)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, timeout=self._timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    async def close(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await asyncio.to_thread(conn.close)

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ConfigurationError("connection is not open; call open() first")
        return self._conn

    async def execute_reader(self, command: SqlCommand) -> list[Mapping[str, Any]]:
        conn = self._require_open()
        if len(command.statements) != 1:
            raise ConfigurationError(f"a reader command takes exactly one statement, got {len(command.statements)}")
        statement = command.statements[0]

        def read() -> list[Mapping[str, Any]]:
            cursor = conn.execute(statement.sql, statement.params)
            return [dict(row) for row in cursor.fetchall()]

        return await asyncio.to_thread(read)

    async def execute_non_query(self, command: SqlCommand) -> int:
        conn = self._require_open()

        def write() -> int:
            affected = 0
            # commits on success, rolls back on error
            with conn:
                for statement in command.statements:
                    cursor = conn.execute(statement.sql, statement.params)
                    if cursor.rowcount > 0:
                        affected += cursor.rowcount
            return affected

        return await asyncio.to_thread(write)

    def __repr__(self) -> str:
        return f"SqliteConnection({self.path!r}, open={self.is_open})"


__all__ = ["SqliteConnection"]
