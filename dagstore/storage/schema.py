"""
DAG Store Schema

Table layout, engine mode and the version policy applied on open.

Version policy: the stored user_version is compared to CURRENT_VERSION. Any
older value means the stored messages and entities come from an incompatible
protocol revision; everything is erased and the marker is rewritten. There is
no incremental migration.
"""

from __future__ import annotations
import logging
from pathlib import Path

import aiosqlite

from dagstore.constants import CURRENT_VERSION
from dagstore.storage.database import Database

logger = logging.getLogger(__name__)


CREATE_TABLES_SQL = """
BEGIN;

-- Messages, one row per globally unique hash
CREATE TABLE IF NOT EXISTS messages (
    channel_id BLOB,
    hash BLOB,
    parent_hashes BLOB,
    height INT,
    blob BLOB,
    PRIMARY KEY (hash ASC)
);

-- CRDT order range scans
CREATE INDEX IF NOT EXISTS crdt ON messages (
    channel_id,
    height ASC,
    hash ASC
);

-- Parent edges (leaf test)
CREATE TABLE IF NOT EXISTS parents (
    channel_id BLOB,
    hash BLOB,
    PRIMARY KEY (hash ASC)
);

CREATE INDEX IF NOT EXISTS channel_id ON parents (channel_id);

-- Namespaced entities
CREATE TABLE IF NOT EXISTS entities (
    prefix TEXT,
    id TEXT,
    blob BLOB
);

CREATE UNIQUE INDEX IF NOT EXISTS entity_id ON entities (prefix, id);

COMMIT;
"""

WIPE_TABLES = ("messages", "parents", "entities")


async def create_tables(db: Database) -> None:
    """Create tables and indexes if absent."""
    await db.executescript(CREATE_TABLES_SQL)


async def set_exclusive_locking(db: Database) -> None:
    await db.execute("PRAGMA locking_mode = EXCLUSIVE")


async def get_version(db: Database) -> int:
    row = await db.fetchone("PRAGMA user_version")
    return int(row[0]) if row else 0


async def set_version(db: Database, version: int) -> None:
    # PRAGMA does not accept bound parameters
    await db.execute(f"PRAGMA user_version = {int(version)}")


async def wipe(db: Database) -> None:
    """Erase all messages, parent edges and entities in one transaction."""
    async with db.transaction() as conn:
        for table in WIPE_TABLES:
            await conn.execute(f"DELETE FROM {table}")


async def ensure_schema(db: Database) -> int:
    """
    Bring an open database up to CURRENT_VERSION.

    Returns:
        The version found on disk before this call.
    """
    await create_tables(db)
    await set_exclusive_locking(db)

    last_version = await get_version(db)

    if last_version < CURRENT_VERSION:
        if last_version > 0:
            logger.warning(
                f"Stored schema version {last_version} < {CURRENT_VERSION}, "
                f"erasing incompatible data"
            )
        await wipe(db)
        await set_version(db, CURRENT_VERSION)
    elif last_version > CURRENT_VERSION:
        logger.warning(
            f"Stored schema version {last_version} is newer than "
            f"supported version {CURRENT_VERSION}, leaving it untouched"
        )

    return last_version


async def peek_version(path: Path) -> int:
    """
    Read the stored version of an existing file without applying the
    version policy. The file is opened read-only and never created.
    """
    uri = f"{path.resolve().as_uri()}?mode=ro"
    async with aiosqlite.connect(uri, uri=True) as conn:
        async with conn.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
    return int(row[0]) if row else 0
