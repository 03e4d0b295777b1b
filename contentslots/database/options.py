"""
Option rows for content slots.

Options are stored one row per (contentslot_id, name) pair. Callers only
ever see a plain name -> value dict; the row representation stays in here.
"""

import asyncpg
import structlog
from typing import Dict, Iterable, List, Optional

logger = structlog.get_logger()


def affected_rows(status: str) -> int:
    """Extract the row count from a command tag like 'UPDATE 1' or 'INSERT 0 1'."""
    try:
        return int(status.rsplit(' ', 1)[-1])
    except (AttributeError, ValueError):
        return 0


class OptionSynchronizer:
    """Reads and reconciles the option rows of content slots."""

    def __init__(self, table_name: str):
        self.table_name = table_name

    async def read_one(self, conn: asyncpg.Connection, slot_id: int) -> Dict[str, str]:
        """Get the options of one content slot as a name -> value dict."""
        rows = await conn.fetch(
            f"SELECT contentslot_id, name, value FROM {self.table_name} WHERE contentslot_id = $1",
            slot_id
        )
        return {row['name']: row['value'] for row in rows}

    async def read_many(
        self,
        conn: asyncpg.Connection,
        slot_ids: Iterable[int]
    ) -> Dict[int, Dict[str, str]]:
        """
        Get the options of several content slots with a single query.

        Every requested id is present in the result, slots without options
        map to an empty dict.
        """
        ids: List[int] = list(slot_ids)
        options: Dict[int, Dict[str, str]] = {slot_id: {} for slot_id in ids}

        rows = await conn.fetch(
            f"SELECT contentslot_id, name, value FROM {self.table_name} "
            "WHERE contentslot_id = ANY($1)",
            ids
        )
        for row in rows:
            options[row['contentslot_id']][row['name']] = row['value']

        return options

    async def synchronize(
        self,
        conn: asyncpg.Connection,
        slot_id: int,
        desired: Optional[Dict[str, str]] = None
    ) -> bool:
        """
        Make the stored options of a slot equal ``desired``.

        Existing names missing from ``desired`` are deleted, existing names
        are updated and new names are inserted. Returns True if any row was
        deleted, inserted or actually changed by an update.
        """
        desired = desired or {}
        existing = await self.read_one(conn, slot_id)
        changed = False
        deleted = updated = inserted = 0

        for name in existing:
            if name not in desired:
                await conn.execute(
                    f"DELETE FROM {self.table_name} WHERE contentslot_id = $1 AND name = $2",
                    slot_id, name
                )
                deleted += 1
                changed = True

        for name, value in desired.items():
            if name in existing:
                # The engine reports 0 rows when the value is already equal
                status = await conn.execute(
                    f"UPDATE {self.table_name} SET value = $1 "
                    f"WHERE contentslot_id = $2 AND name = $3 AND value IS DISTINCT FROM $1",
                    value, slot_id, name
                )
                if affected_rows(status) == 1:
                    updated += 1
                    changed = True
                continue

            await conn.execute(
                f"INSERT INTO {self.table_name} (contentslot_id, name, value) VALUES ($1, $2, $3)",
                slot_id, name, value
            )
            inserted += 1
            changed = True

        logger.debug(
            "options_synchronized",
            content_slot_id=slot_id,
            deleted=deleted,
            updated=updated,
            inserted=inserted,
            changed=changed
        )
        return changed
