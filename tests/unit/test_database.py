"""Unit tests for pool lifecycle, migrations, health check and app lifespan."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from groov.database import (
    MIGRATIONS_DIR,
    close_database,
    health_check,
    init_database,
    run_migrations,
)


class MockConnection:
    """Mock asyncpg connection with common query methods."""

    def __init__(self):
        self.execute = AsyncMock()
        self.fetchval = AsyncMock()


class MockPool:
    """Mock asyncpg pool with acquire() context manager."""

    def __init__(self, conn: MockConnection):
        self._conn = conn
        self.close = AsyncMock()

    def acquire(self):
        return _MockPoolAcquire(self._conn)


class _MockPoolAcquire:
    def __init__(self, conn):
        self._conn = conn

    async def __aenter__(self):
        return self._conn

    async def __aexit__(self, *args):
        pass


@pytest.fixture
def conn():
    return MockConnection()


@pytest.fixture
def pool(conn):
    return MockPool(conn)


class TestPoolLifecycle:
    async def test_init_opens_pool_from_settings(self, settings):
        created = MockPool(MockConnection())
        with patch(
            "groov.database.asyncpg.create_pool", new=AsyncMock(return_value=created)
        ) as create:
            result = await init_database(settings)

        assert result is created
        create.assert_awaited_once()
        assert create.await_args.args[0] == settings.postgres_url

    async def test_init_failure_propagates(self, settings):
        with patch(
            "groov.database.asyncpg.create_pool",
            new=AsyncMock(side_effect=OSError("connection refused")),
        ):
            with pytest.raises(OSError):
                await init_database(settings)

    async def test_init_returns_a_new_pool_each_call(self, settings):
        with patch(
            "groov.database.asyncpg.create_pool",
            new=AsyncMock(side_effect=[MockPool(MockConnection()), MockPool(MockConnection())]),
        ):
            first = await init_database(settings)
            second = await init_database(settings)

        assert first is not second

    async def test_close_closes_given_pool(self, pool):
        await close_database(pool)
        pool.close.assert_awaited_once()


class TestRunMigrations:
    async def test_applies_files_in_name_order(self, pool, conn, tmp_path):
        (tmp_path / "002_second.sql").write_text("SELECT 2;")
        (tmp_path / "001_first.sql").write_text("SELECT 1;")
        (tmp_path / "notes.txt").write_text("ignored")

        await run_migrations(pool, tmp_path)

        executed = [call.args[0] for call in conn.execute.await_args_list]
        assert executed == ["SELECT 1;", "SELECT 2;"]

    async def test_missing_directory_is_skipped(self, pool, conn, tmp_path):
        await run_migrations(pool, tmp_path / "absent")
        conn.execute.assert_not_awaited()

    async def test_failure_propagates(self, pool, conn, tmp_path):
        (tmp_path / "001_broken.sql").write_text("NOT SQL")
        conn.execute.side_effect = Exception("syntax error")

        with pytest.raises(Exception, match="syntax error"):
            await run_migrations(pool, tmp_path)

    def test_ships_auth_schema(self):
        schema = (MIGRATIONS_DIR / "001_auth.sql").read_text()

        assert "CREATE TABLE IF NOT EXISTS app_user" in schema
        assert "CREATE TABLE IF NOT EXISTS refresh_token" in schema
        assert "token TEXT NOT NULL UNIQUE" in schema


class TestHealthCheck:
    async def test_healthy(self, pool, conn):
        conn.fetchval.return_value = 1
        assert await health_check(pool) is True

    async def test_query_failure_is_unhealthy(self, pool, conn):
        conn.fetchval.side_effect = Exception("connection refused")
        assert await health_check(pool) is False


class TestLifespan:
    """The application lifespan owns the pool it opens."""

    def test_pool_is_placed_on_container_and_closed(self):
        from fastapi.testclient import TestClient
        from groov.main import app

        pool = MagicMock()
        with (
            patch("groov.database.init_database", new=AsyncMock(return_value=pool)),
            patch("groov.database.run_migrations", new=AsyncMock()) as migrate,
            patch("groov.database.close_database", new=AsyncMock()) as close,
        ):
            with TestClient(app):
                assert app.state.container.pool is pool
                migrate.assert_awaited_once_with(pool)

            close.assert_awaited_once_with(pool)

    def test_pool_is_closed_when_migrations_fail(self):
        from fastapi.testclient import TestClient
        from groov.main import app

        pool = MagicMock()
        with (
            patch("groov.database.init_database", new=AsyncMock(return_value=pool)),
            patch(
                "groov.database.run_migrations",
                new=AsyncMock(side_effect=RuntimeError("migration failed")),
            ),
            patch("groov.database.close_database", new=AsyncMock()) as close,
        ):
            with pytest.raises(RuntimeError, match="migration failed"):
                with TestClient(app):
                    pass

            close.assert_awaited_once_with(pool)
