"""
Tests for storage error translation.
"""

import asyncio

import asyncpg
import pytest

from contentslots.database.errors import (
    ContentSlotError,
    DuplicateEntryError,
    StorageError,
    translate_storage_error,
)


class TestTranslateStorageError:
    """Test mapping of driver exceptions to domain errors."""

    def test_unique_violation_is_duplicate_entry(self):
        error = translate_storage_error(
            asyncpg.exceptions.UniqueViolationError('duplicate key value')
        )

        assert isinstance(error, DuplicateEntryError)
        assert error.code == '23505'

    @pytest.mark.parametrize("exc,code", [
        (asyncpg.exceptions.ForeignKeyViolationError('fk'), '23503'),
        (asyncpg.exceptions.NotNullViolationError('not null'), '23502'),
        (asyncpg.exceptions.PostgresSyntaxError('syntax'), '42601'),
        (asyncpg.exceptions.TooManyConnectionsError('too many'), '53300'),
    ])
    def test_other_engine_errors_are_storage_errors(self, exc, code):
        error = translate_storage_error(exc)

        assert type(error) is StorageError
        assert error.code == code

    def test_timeout(self):
        """Test that waiting too long for the pool is a StorageError."""
        error = translate_storage_error(asyncio.TimeoutError())

        assert type(error) is StorageError
        assert error.code == 'TIMEOUT'

    def test_connection_refused(self):
        """Test that network errors keep their class name as code."""
        error = translate_storage_error(ConnectionRefusedError(111, 'Connection refused'))

        assert type(error) is StorageError
        assert error.code == 'ConnectionRefusedError'

    def test_interface_error(self):
        error = translate_storage_error(asyncpg.InterfaceError('pool is closing'))

        assert type(error) is StorageError
        assert error.code == 'InterfaceError'
        assert 'pool is closing' in str(error)

    def test_common_base_class(self):
        """Test that callers can catch every storage failure at once."""
        assert issubclass(DuplicateEntryError, ContentSlotError)
        assert issubclass(StorageError, ContentSlotError)
        assert not issubclass(DuplicateEntryError, StorageError)

    def test_message_defaults_to_code(self):
        assert str(StorageError('08006')) == '08006'
        assert str(StorageError()) == 'StorageError'
