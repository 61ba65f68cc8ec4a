"""Environment-driven settings for unitwork.

The core never resolves connection strings on its own; the CLI (or any
host application) reads :class:`UnitworkSettings` and hands the resulting
URL to :func:`unitwork.core.connection.create_connection`.

Fields
──────
database_url : Connection URL (``sqlite:///…``, ``postgresql://…``, ``memory``)
echo_sql     : Log every statement SQLAlchemy issues
log_level    : structlog level
log_json     : Force JSON (True) or console (False) output; None auto-detects

Examples:
    >>> import os
    >>> os.environ["UNITWORK_DATABASE_URL"] = "sqlite:///people.db"
    >>> UnitworkSettings().database_url
    'sqlite:///people.db'

Tags:
    settings, configuration, pydantic, environment, unitwork
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class UnitworkSettings(BaseSettings):
    """Settings read from ``UNITWORK_*`` environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="UNITWORK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite:///unitwork.db",
        description="Database URL handed to create_connection()",
    )
    echo_sql: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None


__all__ = ["UnitworkSettings"]
