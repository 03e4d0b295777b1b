"""
Process-wide asyncpg pool behind the content slot repository.

The pool is created on first use from DATABASE_URL and sized by
DB_POOL_MIN_SIZE / DB_POOL_MAX_SIZE. DB_COMMAND_TIMEOUT bounds each
statement. Two settings belong to the repository rather than the pool:
DB_TABLE_PREFIX selects ``<prefix>contentslots`` and
``<prefix>contentslot_options``, and DB_ACQUIRE_TIMEOUT bounds the wait for
a free connection, so an exhausted pool fails as ``StorageError('TIMEOUT')``
instead of queueing forever.
"""

import asyncpg
import structlog
from typing import Optional

from contentslots.config import settings
from contentslots.database.errors import STORAGE_EXCEPTIONS, translate_storage_error
from contentslots.database.repository import ContentSlotRepository

logger = structlog.get_logger()

_connection_pool: Optional[asyncpg.Pool] = None


async def get_db_pool() -> asyncpg.Pool:
    """Return the shared pool, connecting on the first call.

    A failed connect is not cached; the next call tries again.
    """
    global _connection_pool

    if _connection_pool is None:
        try:
            _connection_pool = await asyncpg.create_pool(
                settings.DATABASE_URL,
                min_size=settings.DB_POOL_MIN_SIZE,
                max_size=settings.DB_POOL_MAX_SIZE,
                command_timeout=settings.DB_COMMAND_TIMEOUT
            )
        except Exception as e:
            logger.error("content_slot_pool_failed", error=str(e))
            raise

        logger.info(
            "content_slot_pool_created",
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
            command_timeout=settings.DB_COMMAND_TIMEOUT
        )

    return _connection_pool


async def get_content_slot_repository() -> ContentSlotRepository:
    """Repository over the shared pool with the configured prefix and timeouts.

    Raises:
        StorageError: The pool could not be created
    """
    try:
        pool = await get_db_pool()
    except STORAGE_EXCEPTIONS as e:
        raise translate_storage_error(e) from e

    return ContentSlotRepository(
        pool,
        settings.DB_TABLE_PREFIX,
        acquire_timeout=settings.DB_ACQUIRE_TIMEOUT,
        atomic_writes=settings.DB_ATOMIC_WRITES
    )


async def close_db_pool():
    """Close the shared pool; later calls to get_db_pool reconnect."""
    global _connection_pool

    if _connection_pool:
        await _connection_pool.close()
        _connection_pool = None
        logger.info("content_slot_pool_closed")
