"""Connection factory: create an ``AsyncConnection`` from a URL string.

Supported URL schemes
---------------------
==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``       SQLite RAM
``sqlite``          ``sqlite:///path/to/file.db``                SQLite file
``(file path)``     ``./data/people.db``                         SQLite file
``postgresql``      ``postgresql://user:pw@host:port/db``        PostgreSQL
==================  ==========================================  ============

Every backend goes through SQLAlchemy (:class:`EngineConnection`); the
PostgreSQL driver itself (``psycopg``/``psycopg2``) is the caller's to
install.

Usage
-----
::

    from unitwork.core.connection import create_connection

    conn, info = create_connection("sqlite:///people.db")
    uow = UnitOfWork(conn)
    print(info)
    # ConnectionInfo(backend='sqlite', persistent=True, path='/abs/people.db')
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from unitwork.adapters.engine import EngineConnection, create_unitwork_engine
from unitwork.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about a database connection."""

    backend: str
    """Backend identifier: ``"sqlite"`` or ``"postgresql"``."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """The original URL or path used to create the connection."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""

    def __repr__(self) -> str:
        parts = [f"backend={self.backend!r}", f"persistent={self.persistent}"]
        if self.resolved_path:
            parts.append(f"path={self.resolved_path!r}")
        else:
            parts.append(f"url={self.url!r}")
        return f"ConnectionInfo({', '.join(parts)})"

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"

    @property
    def is_postgres(self) -> bool:
        return self.backend == "postgresql"


def _parse_url(db: str | None) -> tuple[str, str]:
    """Parse a database URL into ``(scheme, target)``.

    ``scheme`` is one of ``"memory"``, ``"sqlite"``, ``"postgresql"``, ``"file"``.
    """
    if db is None or db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    for prefix in ("sqlite:///", "sqlite://"):
        if db.startswith(prefix):
            path = db[len(prefix):]
            if not path or path == ":memory:":
                return "memory", ":memory:"
            return "sqlite", path

    if db.startswith(("postgresql://", "postgres://", "postgresql+", "postgres+")):
        return "postgresql", db

    return "file", db


def create_connection(
    db: str | None = None,
    *,
    echo: bool = False,
    data_dir: str | None = None,
    **engine_kwargs: Any,
) -> tuple[EngineConnection, ConnectionInfo]:
    """Create an :class:`EngineConnection` from a URL, path, or keyword.

    Parameters
    ----------
    db:
        ``None``/``"memory"`` for in-memory SQLite, a file path,
        ``sqlite:///path`` or a ``postgresql://`` URL.
    echo:
        Forwarded to SQLAlchemy (log every statement).
    data_dir:
        Resolve relative SQLite paths within this directory.

    Returns
    -------
    tuple[EngineConnection, ConnectionInfo]
        The (not yet opened) connection and metadata about it.
    """
    scheme, target = _parse_url(db)

    if scheme == "memory":
        engine = create_unitwork_engine("sqlite://", echo=echo, **engine_kwargs)
        info = ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")

    elif scheme in ("sqlite", "file"):
        path = Path(target)
        if data_dir and not path.is_absolute():
            path = Path(data_dir) / path
        path.parent.mkdir(parents=True, exist_ok=True)
        resolved = str(path.resolve())
        engine = create_unitwork_engine(f"sqlite:///{resolved}", echo=echo, **engine_kwargs)
        info = ConnectionInfo(backend="sqlite", persistent=True, url=target, resolved_path=resolved)

    else:
        url = target.replace("postgres://", "postgresql://", 1)
        engine = create_unitwork_engine(url, echo=echo, **engine_kwargs)
        info = ConnectionInfo(backend="postgresql", persistent=True, url=target)

    logger.debug("connection_created", backend=info.backend, persistent=info.persistent)
    return EngineConnection(engine), info


__all__ = [
    "ConnectionInfo",
    "create_connection",
]
