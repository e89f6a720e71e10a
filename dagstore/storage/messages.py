"""
DAG Store Message Storage

Messages keyed by hash, parent edges per channel, leaf computation and
windowed reads in CRDT order.

CRDT order: (height ASC, hash ASC), hashes compared byte-wise. Every replica
holding the same set of messages derives the same linearization from it,
regardless of insertion order.
"""

from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional, Sequence

from dagstore.constants import MAX_VARIABLE_COUNT
from dagstore.core.hashlist import encode_hash_list
from dagstore.core.types import MessageLike
from dagstore.storage.database import Database, chunked

logger = logging.getLogger(__name__)


class MessageStore:
    """
    Message storage with efficient lookups.

    Provides:
    - Message storage by hash
    - Parent edges and DAG leaves
    - Offset windows in CRDT order
    - Batched lookups bounded by the engine's variable limit
    """

    def __init__(self, db: Database, max_variable_count: int = MAX_VARIABLE_COUNT):
        self.db = db
        self.max_variable_count = max_variable_count

    # =========================================================================
    # Writes
    # =========================================================================

    async def add_message(self, message: MessageLike):
        """
        Insert or replace a message with its parent edges.

        The message row and all edge rows commit together or not at all.
        """
        # Encoding errors must surface before the transaction opens
        parent_hashes = encode_hash_list(message.parents)
        blob = message.serialize_data()

        async with self.db.transaction() as conn:
            await conn.execute(
                """
                REPLACE INTO messages (channel_id, hash, parent_hashes, height, blob)
                VALUES (?, ?, ?, ?, ?)
                """,
                (message.channel_id, message.hash, parent_hashes, message.height, blob)
            )
            await conn.executemany(
                "REPLACE INTO parents (channel_id, hash) VALUES (?, ?)",
                [(message.channel_id, parent) for parent in message.parents]
            )

        logger.debug(
            f"Added message {message.hash.hex()[:16]} at height {message.height} "
            f"with {len(message.parents)} parent(s)"
        )

    async def remove_channel_messages(self, channel_id: bytes):
        """Delete every message and parent edge of a channel."""
        async with self.db.transaction() as conn:
            await conn.execute("DELETE FROM messages WHERE channel_id = ?", (channel_id,))
            await conn.execute("DELETE FROM parents WHERE channel_id = ?", (channel_id,))

        logger.info(f"Removed all messages of channel {channel_id.hex()[:16]}")

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_message_count(self, channel_id: bytes) -> int:
        row = await self.db.fetchone(
            "SELECT COUNT(*) AS count FROM messages WHERE channel_id = ?",
            (channel_id,)
        )
        return row["count"]

    async def get_leaf_hashes(self, channel_id: bytes) -> List[bytes]:
        """Get hashes of messages no other message in the channel points to."""
        return await self.db.fetchcolumn(
            """
            SELECT hash FROM messages
            WHERE messages.channel_id = ? AND
              messages.hash NOT IN
              (SELECT hash FROM parents WHERE channel_id = ?)
            """,
            (channel_id, channel_id)
        )

    async def get_leaves(self, channel_id: bytes) -> List[bytes]:
        """Get payloads of the leaf messages."""
        return await self.db.fetchcolumn(
            """
            SELECT blob FROM messages
            WHERE messages.channel_id = ? AND
              messages.hash NOT IN
              (SELECT hash FROM parents WHERE channel_id = ?)
            """,
            (channel_id, channel_id)
        )

    async def has_message(self, channel_id: bytes, message_hash: bytes) -> bool:
        row = await self.db.fetchone(
            "SELECT COUNT(*) AS count FROM messages WHERE channel_id = ? AND hash = ?",
            (channel_id, message_hash)
        )
        return row["count"] != 0

    async def get_message(self, channel_id: bytes, message_hash: bytes) -> Optional[bytes]:
        """Get message payload by hash, or None."""
        row = await self.db.fetchone(
            "SELECT blob FROM messages WHERE channel_id = ? AND hash = ?",
            (channel_id, message_hash)
        )
        return row["blob"] if row else None

    async def get_messages(
        self,
        channel_id: bytes,
        hashes: Sequence[bytes],
    ) -> List[Optional[bytes]]:
        """
        Get payloads for many hashes at once.

        The result matches `hashes` position by position, duplicates
        included. Hashes missing from the channel map to None.
        """
        # Sorted once so each chunk walks the primary key in order
        targets = sorted(set(hashes))
        found: Dict[bytes, bytes] = {}

        for chunk in chunked(targets, self.max_variable_count):
            placeholders = ", ".join("?" for _ in chunk)
            rows = await self.db.fetchall(
                f"""
                SELECT hash, blob FROM messages
                WHERE channel_id = ? AND hash IN ({placeholders})
                ORDER BY hash
                """,
                (channel_id, *chunk)
            )
            for row in rows:
                found[row["hash"]] = row["blob"]

        if len(targets) > self.max_variable_count:
            logger.debug(
                f"Looked up {len(targets)} messages in "
                f"{math.ceil(len(targets) / self.max_variable_count)} round trips"
            )

        return [found.get(message_hash) for message_hash in hashes]

    async def get_hashes_at_offset(
        self,
        channel_id: bytes,
        offset: int,
        limit: int,
    ) -> List[bytes]:
        """Get a window of hashes in CRDT order."""
        return await self.db.fetchcolumn(
            """
            SELECT hash FROM messages
            WHERE channel_id = ?
            ORDER BY height ASC, hash ASC
            LIMIT ? OFFSET ?
            """,
            (channel_id, max(0, limit), max(0, offset))
        )

    async def get_reverse_hashes_at_offset(
        self,
        channel_id: bytes,
        offset: int,
        limit: int,
    ) -> List[bytes]:
        """Get a window of hashes in reverse CRDT order."""
        return await self.db.fetchcolumn(
            """
            SELECT hash FROM messages
            WHERE channel_id = ?
            ORDER BY height DESC, hash DESC
            LIMIT ? OFFSET ?
            """,
            (channel_id, max(0, limit), max(0, offset))
        )

    async def get_message_at_offset(self, channel_id: bytes, offset: int) -> Optional[bytes]:
        """Get the payload at a CRDT order position, or None past the end."""
        row = await self.db.fetchone(
            """
            SELECT blob FROM messages
            WHERE channel_id = ?
            ORDER BY height ASC, hash ASC
            LIMIT 1 OFFSET ?
            """,
            (channel_id, max(0, offset))
        )
        return row["blob"] if row else None
