"""
Data repository for content slots and their options.
"""

import asyncpg
import structlog
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Mapping, Optional

from contentslots.database.errors import STORAGE_EXCEPTIONS, translate_storage_error
from contentslots.database.options import OptionSynchronizer, affected_rows
from contentslots.models import ContentSlot

logger = structlog.get_logger()

SLOT_COLUMNS = "id, view_id, component_type, column_start, row_start, column_end, row_end"


class ContentSlotRepository:
    """Repository for content slots, each read and written with its options."""

    def __init__(
        self,
        pool: asyncpg.Pool,
        prefix: str = "",
        *,
        acquire_timeout: Optional[float] = None,
        atomic_writes: bool = False
    ):
        """
        Args:
            pool: Connection pool, one connection is acquired per operation
            prefix: Prefix used for the database tables
            acquire_timeout: Seconds to wait for a free connection
            atomic_writes: Run slot and option writes of one operation in a transaction
        """
        self.pool = pool
        self.table_name = f"{prefix}contentslots"
        self.options_table_name = f"{prefix}contentslot_options"
        self.acquire_timeout = acquire_timeout
        self.atomic_writes = atomic_writes
        self.options = OptionSynchronizer(self.options_table_name)

    @asynccontextmanager
    async def _connection(self, write: bool = False) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection for one operation and release it on exit."""
        try:
            async with self.pool.acquire(timeout=self.acquire_timeout) as conn:
                if write and self.atomic_writes:
                    async with conn.transaction():
                        yield conn
                else:
                    yield conn
        except STORAGE_EXCEPTIONS as e:
            error = translate_storage_error(e)
            logger.error("storage_error", table=self.table_name, code=error.code, error=str(e))
            raise error from e

    async def create_content_slot(
        self,
        component_type: str,
        view_id: int,
        column_start: int,
        row_start: int,
        column_end: int,
        row_end: int,
        options: Optional[Dict[str, str]] = None
    ) -> int:
        """
        Store a new content slot and its options.

        Returns:
            ID of the new content slot

        Raises:
            DuplicateEntryError: A uniqueness constraint was violated
            StorageError: Any other storage failure
        """
        async with self._connection(write=True) as conn:
            content_slot_id = await conn.fetchval(
                f"""
                INSERT INTO {self.table_name} (
                    view_id, component_type, column_start, row_start, column_end, row_end
                ) VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING id
                """,
                view_id, component_type, column_start, row_start, column_end, row_end
            )
            await self.options.synchronize(conn, content_slot_id, options)

        logger.info(
            "content_slot_created",
            content_slot_id=content_slot_id,
            view_id=view_id,
            component_type=component_type,
            option_count=len(options or {})
        )
        return content_slot_id

    async def delete_one(self, content_slot_id: int) -> Optional[int]:
        """
        Delete a content slot.

        Returns:
            The ID if the content slot existed before deletion, None otherwise
        """
        async with self._connection() as conn:
            status = await conn.execute(
                f"DELETE FROM {self.table_name} WHERE id = $1",
                content_slot_id
            )

        if affected_rows(status) != 1:
            return None

        logger.info("content_slot_deleted", content_slot_id=content_slot_id)
        return content_slot_id

    async def get_one(self, content_slot_id: int) -> Optional[ContentSlot]:
        """Get a content slot with its options by ID."""
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {SLOT_COLUMNS} FROM {self.table_name} WHERE id = $1",
                content_slot_id
            )
            if not row:
                return None

            options = await self.options.read_one(conn, content_slot_id)
            return self.row_to_object_with_options(row, options)

    async def get_content_slots_by_view_id(self, view_id: int) -> List[ContentSlot]:
        """
        Get the content slots that belong to a view, with their options.

        Options of all found slots are fetched with one query.
        """
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"SELECT {SLOT_COLUMNS} FROM {self.table_name} WHERE view_id = $1 ORDER BY id",
                view_id
            )

            if not rows:
                return []

            options = await self.options.read_many(conn, [row['id'] for row in rows])
            return [
                self.row_to_object_with_options(row, options[row['id']])
                for row in rows
            ]

    async def get_content_slots_by_component_type(self, component_type: str) -> List[ContentSlot]:
        """
        Get the content slots that display a certain type of component.

        Options are not loaded, every returned slot has an empty options dict.
        """
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"SELECT {SLOT_COLUMNS} FROM {self.table_name} WHERE component_type = $1 ORDER BY id",
                component_type
            )
            return [self.row_to_object(row) for row in rows]

    async def update_content_slot(
        self,
        content_slot_id: int,
        component_type: str,
        view_id: int,
        column_start: int,
        row_start: int,
        column_end: int,
        row_end: int,
        options: Optional[Dict[str, str]] = None
    ) -> Optional[int]:
        """
        Update a content slot and replace its options.

        Returns:
            The ID if the slot row or its options changed, None otherwise
        """
        async with self._connection(write=True) as conn:
            # Only counts the row when at least one column actually differs
            status = await conn.execute(
                f"""
                UPDATE {self.table_name}
                SET view_id = $1, component_type = $2, column_start = $3,
                    row_start = $4, column_end = $5, row_end = $6
                WHERE id = $7
                  AND (view_id, component_type, column_start, row_start, column_end, row_end)
                      IS DISTINCT FROM ($1, $2, $3, $4, $5, $6)
                """,
                view_id, component_type, column_start, row_start, column_end, row_end,
                content_slot_id
            )
            content_slot_changed = affected_rows(status) == 1
            options_changed = await self.options.synchronize(conn, content_slot_id, options)

        if not (content_slot_changed or options_changed):
            return None

        logger.info(
            "content_slot_updated",
            content_slot_id=content_slot_id,
            row_changed=content_slot_changed,
            options_changed=options_changed
        )
        return content_slot_id

    @staticmethod
    def row_to_object(row: Mapping) -> ContentSlot:
        """Map a slot row to a ContentSlot without options."""
        return ContentSlot(
            id=row['id'],
            view_id=row['view_id'],
            component_type=row['component_type'],
            column_start=row['column_start'],
            row_start=row['row_start'],
            column_end=row['column_end'],
            row_end=row['row_end'],
            options={}
        )

    @classmethod
    def row_to_object_with_options(cls, row: Mapping, options: Dict[str, str]) -> ContentSlot:
        """Map a slot row and its option dict to a ContentSlot."""
        content_slot = cls.row_to_object(row)
        content_slot.options.update(options)
        return content_slot
