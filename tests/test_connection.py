"""
Tests for the shared connection pool.
"""

import asyncpg
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from contentslots.database import ContentSlotRepository, StorageError, connection


@pytest.fixture(autouse=True)
def reset_pool():
    connection._connection_pool = None
    yield
    connection._connection_pool = None


class TestConnectionPool:
    """Test pool creation and shutdown."""

    @pytest.mark.asyncio
    async def test_pool_created_once(self):
        """Test that the pool is created lazily and reused."""
        pool = MagicMock()
        with patch('contentslots.database.connection.asyncpg.create_pool',
                   AsyncMock(return_value=pool)) as create_pool:
            first = await connection.get_db_pool()
            second = await connection.get_db_pool()

        assert first is pool
        assert second is pool
        create_pool.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_pool_uses_settings(self):
        settings = connection.settings
        with patch('contentslots.database.connection.asyncpg.create_pool',
                   AsyncMock(return_value=MagicMock())) as create_pool:
            await connection.get_db_pool()

        create_pool.assert_awaited_once_with(
            settings.DATABASE_URL,
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
            command_timeout=settings.DB_COMMAND_TIMEOUT
        )

    @pytest.mark.asyncio
    async def test_pool_creation_failure(self):
        """Test that a failed connect is raised and not cached."""
        with patch('contentslots.database.connection.asyncpg.create_pool',
                   AsyncMock(side_effect=OSError("refused"))):
            with pytest.raises(OSError):
                await connection.get_db_pool()

        assert connection._connection_pool is None

    @pytest.mark.asyncio
    async def test_close_pool(self):
        pool = MagicMock()
        pool.close = AsyncMock()
        connection._connection_pool = pool

        await connection.close_db_pool()

        pool.close.assert_awaited_once()
        assert connection._connection_pool is None

    @pytest.mark.asyncio
    async def test_close_without_pool(self):
        await connection.close_db_pool()

        assert connection._connection_pool is None


class TestContentSlotRepositoryFactory:
    """Test the repository built over the shared pool."""

    @pytest.mark.asyncio
    async def test_repository_uses_settings(self):
        """Test that the prefix and acquire timeout come from settings."""
        settings = connection.settings
        pool = MagicMock()
        connection._connection_pool = pool

        with patch.object(settings, 'DB_TABLE_PREFIX', "cms_"), \
                patch.object(settings, 'DB_ACQUIRE_TIMEOUT', 3):
            repository = await connection.get_content_slot_repository()

        assert isinstance(repository, ContentSlotRepository)
        assert repository.pool is pool
        assert repository.table_name == "cms_contentslots"
        assert repository.options.table_name == "cms_contentslot_options"
        assert repository.acquire_timeout == 3

    @pytest.mark.asyncio
    async def test_pool_failure_raises_storage_error(self):
        """Test that a failed connect surfaces as StorageError, chained."""
        error = OSError("refused")
        with patch('contentslots.database.connection.asyncpg.create_pool',
                   AsyncMock(side_effect=error)):
            with pytest.raises(StorageError) as exc_info:
                await connection.get_content_slot_repository()

        assert exc_info.value.code == 'OSError'
        assert exc_info.value.__cause__ is error
        assert connection._connection_pool is None

    @pytest.mark.asyncio
    async def test_unknown_database_keeps_sqlstate(self):
        with patch('contentslots.database.connection.asyncpg.create_pool',
                   AsyncMock(side_effect=asyncpg.exceptions.InvalidCatalogNameError(
                       'database "contentslots" does not exist'))):
            with pytest.raises(StorageError) as exc_info:
                await connection.get_content_slot_repository()

        assert exc_info.value.code == '3D000'
