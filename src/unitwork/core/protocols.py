"""
Canonical protocol definitions for unitwork.

The core talks to a database only through :class:`AsyncConnection`.  How a
connection is configured, which driver it wraps and where its URL comes
from are the host application's business; the unit of work and the
repository receive a ready-to-use object satisfying this shape.

Manifesto:
    Protocols define contracts without inheritance. Any object with the
    right coroutines works: the bundled SQLAlchemy and sqlite3 adapters,
    an ``AsyncMock`` in a unit test, or a caller's own driver wrapper.

Architecture:
    ::

        AsyncConnection Protocol:
        ┌──────────────────────────────────────────────────────────────┐
        │ open()                       → acquire the physical link     │
        │ close()                      → release it (idempotent)       │
        │ execute_reader(command)      → list of column→value mappings │
        │ execute_non_query(command)   → affected row count            │
        └──────────────────────────────────────────────────────────────┘

        opened(conn):  open → yield → close (also on exceptions)

    Connections are opened immediately before a statement and closed
    immediately after; nothing in the core holds one across calls.

Tags:
    protocol, connection, async, database, unitwork
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from unitwork.orm.command import SqlCommand


@runtime_checkable
class AsyncConnection(Protocol):
    """
    Asynchronous connection provider.

    ``execute_non_query`` receives a whole batch (one or more statements
    rendered by :class:`~unitwork.orm.command.CommandBuilder`) and runs it
    as a single call: either every statement is applied or the call raises.
    """

    async def open(self) -> None:
        """Open the underlying connection."""
        ...

    async def close(self) -> None:
        """Close the underlying connection. Safe to call when already closed."""
        ...

    async def execute_reader(self, command: SqlCommand) -> list[Mapping[str, Any]]:
        """Run a single query and return its rows keyed by column name."""
        ...

    async def execute_non_query(self, command: SqlCommand) -> int:
        """Run a batch and return the total number of affected rows."""
        ...


@asynccontextmanager
async def opened(connection: AsyncConnection) -> AsyncIterator[AsyncConnection]:
    """Open *connection* for the duration of the block and always close it."""
    await connection.open()
    try:
        yield connection
    finally:
        await connection.close()


__all__ = [
    "AsyncConnection",
    "opened",
]
