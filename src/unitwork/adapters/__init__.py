"""``AsyncConnection`` adapters.

engine   SQLAlchemy engine adapter (any SQLAlchemy-supported database)
sqlite   Standard library sqlite3 adapter
"""

from unitwork.adapters.engine import EngineConnection, create_unitwork_engine
from unitwork.adapters.sqlite import SqliteConnection

__all__ = [
    "EngineConnection",
    "SqliteConnection",
    "create_unitwork_engine",
]
