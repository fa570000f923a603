"""Database connection and migration management.

The pool is opened once in the application lifespan and handed to the
service container; nothing here holds on to it.
"""

from pathlib import Path

import asyncpg
import structlog

from groov.config import Settings

logger = structlog.get_logger(__name__)

POOL_MIN_SIZE = 2
POOL_MAX_SIZE = 10
COMMAND_TIMEOUT_SECONDS = 60

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"


async def init_database(settings: Settings) -> asyncpg.Pool:
    """Open the connection pool.

    Returns:
        asyncpg connection pool

    Raises:
        Exception: Whatever asyncpg raises when the server is unreachable
    """
    try:
        pool = await asyncpg.create_pool(
            settings.postgres_url,
            min_size=POOL_MIN_SIZE,
            max_size=POOL_MAX_SIZE,
            command_timeout=COMMAND_TIMEOUT_SECONDS,
        )
    except Exception as e:
        logger.error("database_pool_creation_failed", error=str(e))
        raise

    logger.info("database_pool_created", min_size=POOL_MIN_SIZE, max_size=POOL_MAX_SIZE)
    return pool


async def close_database(pool: asyncpg.Pool) -> None:
    """Close the connection pool."""
    await pool.close()
    logger.info("database_pool_closed")


async def run_migrations(pool: asyncpg.Pool, migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """Apply every ``*.sql`` file in file-name order.

    Migrations are idempotent (IF NOT EXISTS) and run on every startup.
    """
    if not migrations_dir.exists():
        logger.warning("migrations_directory_not_found", path=str(migrations_dir))
        return

    migration_files = sorted(migrations_dir.glob("*.sql"))
    if not migration_files:
        logger.info("no_migrations_found")
        return

    async with pool.acquire() as conn:
        for migration_file in migration_files:
            try:
                await conn.execute(migration_file.read_text())
            except Exception as e:
                logger.error("migration_failed", file=migration_file.name, error=str(e))
                raise
            logger.info("migration_applied", file=migration_file.name)


async def health_check(pool: asyncpg.Pool) -> bool:
    """Return True when the pool can run a trivial query."""
    try:
        async with pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return False
