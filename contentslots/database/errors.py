"""
Storage error types raised by the content slot repository.

Raw asyncpg exceptions never leave the repository; they are translated
here into two domain errors that carry the engine's diagnostic code.
"""

import asyncio
from typing import Optional

import asyncpg

# SQLSTATE unique_violation
DUPLICATE_ENTRY_SQLSTATE = '23505'
TIMEOUT_CODE = 'TIMEOUT'


class ContentSlotError(Exception):
    """Base exception for content slot storage."""

    def __init__(self, code: Optional[str] = None, message: Optional[str] = None):
        self.code = code
        super().__init__(message or code or self.__class__.__name__)


class DuplicateEntryError(ContentSlotError):
    """A uniqueness constraint was violated."""
    pass


class StorageError(ContentSlotError):
    """Any other storage failure: connectivity, syntax, constraints, pool."""
    pass


# Exceptions that originate from the driver or the pool
STORAGE_EXCEPTIONS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
    OSError,
)


def translate_storage_error(error: BaseException) -> ContentSlotError:
    """Map a driver-level exception to DuplicateEntryError or StorageError."""
    if isinstance(error, asyncpg.PostgresError):
        code = getattr(error, 'sqlstate', None)
        if code == DUPLICATE_ENTRY_SQLSTATE:
            return DuplicateEntryError(code, str(error))
        return StorageError(code, str(error))

    if isinstance(error, asyncio.TimeoutError):
        return StorageError(TIMEOUT_CODE, "Timed out waiting for the database")

    return StorageError(type(error).__name__, str(error))
