"""
DAG Store Entity Storage

Namespaced key-value blobs (identities, channel lists, ...), independent of
the message DAG.
"""

from __future__ import annotations
from typing import List, Optional

from dagstore.storage.database import Database


class EntityStore:
    """
    Blob storage keyed by (prefix, id).

    The prefix groups one kind of object; ids are unique within a prefix.
    """

    def __init__(self, db: Database):
        self.db = db

    async def store_entity(self, prefix: str, entity_id: str, blob: bytes):
        """Insert or replace an entity."""
        await self.db.execute(
            """
            REPLACE INTO entities (prefix, id, blob)
            VALUES (?, ?, ?)
            """,
            (prefix, entity_id, blob)
        )

    async def retrieve_entity(self, prefix: str, entity_id: str) -> Optional[bytes]:
        """Get entity blob, or None if absent."""
        row = await self.db.fetchone(
            "SELECT blob FROM entities WHERE prefix = ? AND id = ?",
            (prefix, entity_id)
        )
        return row["blob"] if row else None

    async def remove_entity(self, prefix: str, entity_id: str):
        """Delete entity. Missing entities are ignored."""
        await self.db.execute(
            "DELETE FROM entities WHERE prefix = ? AND id = ?",
            (prefix, entity_id)
        )

    async def get_entity_keys(self, prefix: str) -> List[str]:
        """Get all ids stored under a prefix."""
        return await self.db.fetchcolumn(
            "SELECT id FROM entities WHERE prefix = ?",
            (prefix,)
        )

    async def get_entity_count(self) -> int:
        """Count entities across all prefixes."""
        row = await self.db.fetchone("SELECT COUNT(*) AS count FROM entities")
        return row["count"]
