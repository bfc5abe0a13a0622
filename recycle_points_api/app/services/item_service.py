"""
Read access to the item catalog.

Items are reference data seeded by ``core.db.init_db``; nothing in
this service writes to the ``items`` table.  The helpers taking a
``conn`` argument run on the caller's connection so they can be used
inside a unit of work.
"""

import logging
import sqlite3
from typing import Iterable, List, Set

from recycle_points_api.app.core.db import get_connection
from recycle_points_api.app.core.errors import PersistenceFailure
from recycle_points_api.app.schemas.item import ItemBrief, ItemRead


logger = logging.getLogger(__name__)


class ItemService:
    """Service for the item catalog."""

    @classmethod
    async def list_items(cls, image_base_url: str) -> List[ItemRead]:
        """Return every item with its icon URL, ordered by id."""
        base = image_base_url.rstrip("/")
        conn = get_connection()
        try:
            rows = conn.execute("SELECT id, title, image FROM items ORDER BY id").fetchall()
            return [
                ItemRead(id=row["id"], title=row["title"], image_url=f"{base}/{row['image']}")
                for row in rows
            ]
        except sqlite3.Error as exc:
            logger.error("Failed to read the item catalog", exc_info=exc)
            raise PersistenceFailure(location="list_items") from exc
        finally:
            conn.close()

    @staticmethod
    def items_for_point(conn: sqlite3.Connection, point_id: int) -> List[ItemBrief]:
        """Items accepted by one point."""
        rows = conn.execute(
            """
            SELECT items.id, items.title
            FROM items
            JOIN point_items ON items.id = point_items.item_id
            WHERE point_items.point_id = ?
            ORDER BY items.id
            """,
            (point_id,),
        ).fetchall()
        return [ItemBrief(id=row["id"], title=row["title"]) for row in rows]

    @staticmethod
    def missing_item_ids(conn: sqlite3.Connection, item_ids: Iterable[int]) -> Set[int]:
        """Return the identifiers in ``item_ids`` that are not in the catalog."""
        wanted = set(item_ids)
        if not wanted:
            return set()
        placeholders = ", ".join("?" for _ in wanted)
        rows = conn.execute(
            f"SELECT id FROM items WHERE id IN ({placeholders})",
            tuple(wanted),
        ).fetchall()
        return wanted - {row["id"] for row in rows}
