"""Tests for the SQLAlchemy engine adapter."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from unitwork.adapters.engine import EngineConnection, create_unitwork_engine
from unitwork.core.errors import ConfigurationError
from unitwork.core.protocols import AsyncConnection, opened
from unitwork.orm.command import Parameter, SqlCommand, Statement

CREATE = SqlCommand.single('CREATE TABLE "T" ("Id" TEXT PRIMARY KEY, "V" INTEGER);')


def _insert(*rows: tuple[str, int]) -> SqlCommand:
    statements = []
    for i, (row_id, value) in enumerate(rows):
        statements.append(
            Statement(
                f'INSERT INTO "T" ("Id","V") VALUES (:a{i},:b{i});',
                [Parameter(f"a{i}", row_id), Parameter(f"b{i}", value)],
            )
        )
    return SqlCommand(statements)


class TestCreateEngine:
    def test_memory_uses_static_pool(self):
        engine = create_unitwork_engine("sqlite://")
        assert isinstance(engine.pool, StaticPool)

    def test_file_database(self, tmp_path):
        engine = create_unitwork_engine(f"sqlite:///{tmp_path / 'x.db'}")
        assert not isinstance(engine.pool, StaticPool)


class TestEngineConnection:
    def test_satisfies_protocol(self, memory_connection):
        assert isinstance(memory_connection, AsyncConnection)

    def test_none_engine(self):
        with pytest.raises(ConfigurationError):
            EngineConnection(None)

    @pytest.mark.asyncio
    async def test_requires_open(self, memory_connection):
        with pytest.raises(ConfigurationError):
            await memory_connection.execute_non_query(CREATE)

    @pytest.mark.asyncio
    async def test_open_close(self, memory_connection):
        await memory_connection.open()
        assert memory_connection.is_open
        await memory_connection.close()
        await memory_connection.close()
        assert not memory_connection.is_open

    @pytest.mark.asyncio
    async def test_batch_write_then_read(self, memory_connection):
        async with opened(memory_connection) as conn:
            await conn.execute_non_query(CREATE)
            affected = await conn.execute_non_query(_insert(("a", 1), ("b", 2)))
            rows = await conn.execute_reader(SqlCommand.single('SELECT "Id","V" FROM "T";'))

        assert affected == 2
        assert sorted((r["Id"], r["V"]) for r in rows) == [("a", 1), ("b", 2)]

    @pytest.mark.asyncio
    async def test_failed_batch_rolls_back(self, memory_connection):
        async with opened(memory_connection) as conn:
            await conn.execute_non_query(CREATE)
            with pytest.raises(IntegrityError):
                await conn.execute_non_query(_insert(("a", 1), ("a", 2)))
            rows = await conn.execute_reader(SqlCommand.single('SELECT "Id" FROM "T";'))

        assert rows == []

    @pytest.mark.asyncio
    async def test_reader_takes_one_statement(self, memory_connection):
        async with opened(memory_connection) as conn:
            with pytest.raises(ConfigurationError):
                await conn.execute_reader(_insert(("a", 1), ("b", 2)))

    @pytest.mark.asyncio
    async def test_data_survives_reopen_in_memory(self, memory_connection):
        async with opened(memory_connection) as conn:
            await conn.execute_non_query(CREATE)
            await conn.execute_non_query(_insert(("a", 1)))
        async with opened(memory_connection) as conn:
            rows = await conn.execute_reader(SqlCommand.single('SELECT "V" FROM "T";'))
        assert rows == [{"V": 1}]
