"""
DAG Store Cursor Queries

Pages through a channel in CRDT order, anchored at a message hash or at a
height, and returns cursors to continue in either direction.

    forward from hash H:   rows >= H, ascending
    backward from hash H:  rows <  H, descending, then reversed
    forward from height h: rows with height >= h, ascending

One extra row is fetched past `limit` to learn whether more data exists
without a second round trip.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

from dagstore.core.hashlist import decode_hash_list
from dagstore.core.types import AbbreviatedMessage, Cursor, QueryResult
from dagstore.errors import UnsupportedQueryError
from dagstore.storage.database import Database

logger = logging.getLogger(__name__)

# (hash, encoded parent hashes)
Row = Tuple[bytes, bytes]


FORWARD_FROM_HASH_SQL = """
SELECT hash, parent_hashes FROM messages
WHERE channel_id = ? AND
  (height > ? OR (height = ? AND hash >= ?))
ORDER BY height ASC, hash ASC
LIMIT ?
"""

BACKWARD_FROM_HASH_SQL = """
SELECT hash, parent_hashes FROM messages
WHERE channel_id = ? AND
  (height < ? OR (height = ? AND hash < ?))
ORDER BY height DESC, hash DESC
LIMIT ?
"""

FORWARD_FROM_HEIGHT_SQL = """
SELECT hash, parent_hashes FROM messages
WHERE channel_id = ? AND height >= ?
ORDER BY height ASC, hash ASC
LIMIT ?
"""


def paginate(
    rows: Sequence[Row],
    limit: int,
    is_backward: bool,
    anchor_hash: Optional[bytes] = None,
) -> QueryResult:
    """
    Build a page from up to limit + 1 rows already in ascending order.

    Backward: the surplus row is the earliest one. It is dropped and
    backward_hash points at the first kept row, so the next backward query
    (strictly before that row) returns it. forward_hash is the anchor.

    Forward: backward_hash is the first row. The surplus row is the last
    one; it is dropped and becomes forward_hash (the next forward query is
    inclusive, so it is not lost).
    """
    page = [
        AbbreviatedMessage(hash=message_hash, parents=decode_hash_list(parent_hashes))
        for message_hash, parent_hashes in rows
    ]
    backward_hash = None
    forward_hash = None

    if is_backward:
        forward_hash = anchor_hash
        if len(page) > limit:
            page = page[1:]
            backward_hash = page[0].hash if page else anchor_hash
    else:
        backward_hash = rows[0][0] if rows else None
        if len(page) > limit:
            page = page[:limit]
            forward_hash = rows[-1][0]

    return QueryResult(page=page, backward_hash=backward_hash, forward_hash=forward_hash)


class CursorQuery:
    """Cursor pagination over the messages table."""

    def __init__(self, db: Database):
        self.db = db

    async def query(
        self,
        channel_id: bytes,
        cursor: Cursor,
        is_backward: bool,
        limit: int,
    ) -> QueryResult:
        """Fetch one page of the channel starting at `cursor`."""
        limit = max(0, limit)

        if cursor.is_hash:
            row = await self.db.fetchone(
                "SELECT height FROM messages WHERE channel_id = ? AND hash = ?",
                (channel_id, cursor.hash)
            )
            if row is None:
                logger.debug(f"Query anchor {cursor.hash.hex()[:16]} not found")
                return QueryResult()

            height = row["height"]
            sql = BACKWARD_FROM_HASH_SQL if is_backward else FORWARD_FROM_HASH_SQL
            params = (channel_id, height, height, cursor.hash, limit + 1)
        else:
            if is_backward:
                raise UnsupportedQueryError("Backwards query by height is not supported")
            sql = FORWARD_FROM_HEIGHT_SQL
            params = (channel_id, cursor.height, limit + 1)

        rows: List[Row] = [
            (row["hash"], row["parent_hashes"])
            for row in await self.db.fetchall(sql, params)
        ]
        if is_backward:
            rows.reverse()

        return paginate(rows, limit, is_backward, anchor_hash=cursor.hash)
