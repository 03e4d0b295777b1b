"""
Database connection and repository layer.
"""

from .errors import ContentSlotError, DuplicateEntryError, StorageError
from .options import OptionSynchronizer
from .repository import ContentSlotRepository
from .connection import get_db_pool, get_content_slot_repository, close_db_pool

__all__ = [
    'get_db_pool',
    'get_content_slot_repository',
    'close_db_pool',
    'ContentSlotError',
    'DuplicateEntryError',
    'StorageError',
    'OptionSynchronizer',
    'ContentSlotRepository',
]
