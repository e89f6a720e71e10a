"""
DAG Store Database Connection

Single boundary between the async store API and the SQLite engine. All
statements go through one aiosqlite connection guarded by one asyncio.Lock,
so transactions run serially and never interleave with other statements.
"""

from __future__ import annotations
import asyncio
import logging
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Iterable, List, Optional, Sequence, Any

import aiosqlite

from dagstore.constants import TEMP_DIR_PREFIX, TEMP_DB_NAME, TRACE_LOGGER_NAME
from dagstore.errors import StoreNotOpenError, StoreAlreadyOpenError

logger = logging.getLogger(__name__)
trace_logger = logging.getLogger(TRACE_LOGGER_NAME)

Params = Sequence[Any]


class Database:
    """
    aiosqlite connection wrapper.

    With no path configured, the database lives in a private temporary
    directory that is removed again on close().
    """

    def __init__(self, path: Optional[Path] = None, trace: bool = False):
        self.path: Optional[Path] = Path(path) if path else None
        self.trace = trace
        self._conn: Optional[aiosqlite.Connection] = None
        self._temp_dir: Optional[tempfile.TemporaryDirectory] = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def is_temporary(self) -> bool:
        return self._temp_dir is not None

    async def open(self):
        """Open the connection, allocating a temporary file if needed."""
        async with self._lock:
            if self._conn is not None:
                raise StoreAlreadyOpenError(str(self.path))

            if self.path is None:
                self._temp_dir = tempfile.TemporaryDirectory(prefix=TEMP_DIR_PREFIX)
                self.path = Path(self._temp_dir.name) / TEMP_DB_NAME
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)

            try:
                conn = await aiosqlite.connect(
                    str(self.path),
                    isolation_level=None,  # Explicit BEGIN/COMMIT only
                )
            except Exception:
                self._release_temp_dir()
                raise

            conn.row_factory = aiosqlite.Row
            if self.trace:
                await conn.set_trace_callback(trace_logger.debug)

            self._conn = conn
            logger.info(f"Database opened: {self.path}")

    async def close(self):
        """Close the connection and drop any temporary directory."""
        async with self._lock:
            if self._conn is not None:
                await self._conn.close()
                self._conn = None
                logger.info(f"Database closed: {self.path}")
            if self._release_temp_dir():
                self.path = None

    def _release_temp_dir(self) -> bool:
        if self._temp_dir is None:
            return False
        self._temp_dir.cleanup()
        self._temp_dir = None
        return True

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StoreNotOpenError()
        return self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Run a unit of work atomically.

        Statements must be issued on the yielded connection, not through
        execute()/fetchall(), which would wait on the held lock.
        """
        async with self._lock:
            conn = self._connection()
            await conn.execute("BEGIN")
            try:
                yield conn
                await conn.execute("COMMIT")
            except BaseException:
                await conn.execute("ROLLBACK")
                raise

    async def execute(self, sql: str, params: Params = ()) -> None:
        """Execute a single statement outside of an explicit transaction."""
        async with self._lock:
            await self._connection().execute(sql, params)

    async def executescript(self, script: str) -> None:
        async with self._lock:
            await self._connection().executescript(script)

    async def fetchone(self, sql: str, params: Params = ()) -> Optional[aiosqlite.Row]:
        """Fetch single row."""
        async with self._lock:
            async with self._connection().execute(sql, params) as cursor:
                return await cursor.fetchone()

    async def fetchall(self, sql: str, params: Params = ()) -> List[aiosqlite.Row]:
        """Fetch all rows."""
        async with self._lock:
            async with self._connection().execute(sql, params) as cursor:
                return list(await cursor.fetchall())

    async def fetchcolumn(self, sql: str, params: Params = ()) -> List[Any]:
        """Fetch the first column of every row."""
        rows = await self.fetchall(sql, params)
        return [row[0] for row in rows]


def chunked(items: Sequence[Any], size: int) -> Iterable[Sequence[Any]]:
    """Split a sequence into consecutive slices of at most `size` items."""
    for offset in range(0, len(items), size):
        yield items[offset:offset + size]
