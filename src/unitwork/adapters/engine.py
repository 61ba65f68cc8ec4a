"""SQLAlchemy engine adapter for the ``AsyncConnection`` protocol.

Manifesto:
    The unit of work is asynchronous, but the SQLAlchemy Core engine and
    the DB-API drivers under it are blocking.  ``EngineConnection`` keeps
    the driver work on a worker thread (``asyncio.to_thread``) so the event
    loop never blocks, and checks out one pooled connection per
    ``open()`` / ``close()`` pair.

This module provides:

* ``create_unitwork_engine`` -- Create a SA engine from a URL with sane defaults.
* ``EngineConnection``       -- Wraps a SA ``Engine`` to satisfy
  ``unitwork.core.protocols.AsyncConnection``.

Batches:
    A :class:`~unitwork.orm.command.SqlCommand` may hold several statements.
    DB-API drivers refuse a multi-statement string with bound parameters,
    so ``execute_non_query`` runs the statements one after another inside a
    single ``Connection.begin()`` block: all of them commit or none do.

Tags:
    unitwork, sqlalchemy, engine, adapter, async, connection
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event, text
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from unitwork.core.errors import ConfigurationError
from unitwork.core.logging import get_logger
from unitwork.orm.command import SqlCommand

logger = get_logger(__name__)

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def create_unitwork_engine(url: str = "sqlite:///unitwork.db", *, echo: bool = False, **kwargs: Any) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql://…``, etc.)
    echo:
        If ``True``, log all SQL to stdout.
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if not url.startswith("sqlite"):
        return _sa_create_engine(url, echo=echo, **kwargs)

    kwargs.setdefault("connect_args", {"check_same_thread": False})
    in_memory = url in _MEMORY_URLS
    if in_memory:
        # one shared connection, otherwise every checkout sees an empty database
        kwargs.setdefault("poolclass", StaticPool)

    engine = _sa_create_engine(url, echo=echo, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
        cursor = dbapi_connection.cursor()
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


class EngineConnection:
    """Adapter that makes a SQLAlchemy ``Engine`` look like ``AsyncConnection``."""

    def __init__(self, engine: Engine) -> None:
        if engine is None:
            raise ConfigurationError("engine cannot be None")
        self._engine = engine
        self._conn: SAConnection | None = None

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    # --- lifecycle ---

    async def open(self) -> None:
        if self._conn is None:
            self._conn = await asyncio.to_thread(self._engine.connect)

    async def close(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await asyncio.to_thread(conn.close)

    def _require_open(self) -> SAConnection:
        if self._conn is None:
            raise ConfigurationError("connection is not open; call open() first")
        return self._conn

    # --- execution ---

    async def execute_reader(self, command: SqlCommand) -> list[Mapping[str, Any]]:
        conn = self._require_open()
        return await asyncio.to_thread(_read, conn, command)

    async def execute_non_query(self, command: SqlCommand) -> int:
        conn = self._require_open()
        return await asyncio.to_thread(_write, conn, command)

    def __repr__(self) -> str:
        return f"EngineConnection({self._engine.url!r}, open={self.is_open})"


def _read(conn: SAConnection, command: SqlCommand) -> list[Mapping[str, Any]]:
    if len(command.statements) != 1:
        raise ConfigurationError(f"a reader command takes exactly one statement, got {len(command.statements)}")
    statement = command.statements[0]
    result = conn.execute(text(statement.sql), statement.params)
    rows = [dict(row) for row in result.mappings()]
    # end the implicit transaction so the next write can begin() cleanly
    conn.rollback()
    return rows


def _write(conn: SAConnection, command: SqlCommand) -> int:
    affected = 0
    with conn.begin():
        for statement in command.statements:
            result = conn.execute(text(statement.sql), statement.params)
            # DDL reports -1
            if result.rowcount > 0:
                affected += result.rowcount
    return affected


__all__ = [
    "create_unitwork_engine",
    "EngineConnection",
]
