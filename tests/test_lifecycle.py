"""
DAG Store Lifecycle and Schema Tests
"""

import logging
import sqlite3

import pytest

from dagstore import CURRENT_VERSION, Message, Storage, StorageConfig
from dagstore.errors import InvalidParameterError, StoreAlreadyOpenError, StoreNotOpenError


async def populate(storage, channel_id):
    await storage.add_message(Message(channel_id, b"a", 0, [], b"root"))
    await storage.store_entity("identity", "alice", b"blob")


class TestOpenClose:
    """Tests for opening and closing storage."""

    @pytest.mark.asyncio
    async def test_temporary_file_removed_on_close(self):
        """Test an unconfigured store lives in a temporary directory."""
        storage = Storage()
        await storage.open()

        path = storage.db.path
        assert storage.db.is_temporary
        assert path.exists()

        await storage.close()
        assert not path.parent.exists()

    @pytest.mark.asyncio
    async def test_context_manager(self, channel_id):
        """Test async with opens and closes the store."""
        async with Storage() as storage:
            await populate(storage, channel_id)
            assert await storage.get_message_count(channel_id) == 1
        assert not storage.db.is_open

    @pytest.mark.asyncio
    async def test_file_store_persists(self, tmp_path, channel_id):
        """Test data survives reopening a file-backed store."""
        config = StorageConfig(file=str(tmp_path / "data" / "store.db"))

        async with Storage(config) as storage:
            assert storage.db.path == config.path
            await populate(storage, channel_id)

        async with Storage(config) as storage:
            assert await storage.get_message(channel_id, b"a") == b"root"
            assert await storage.retrieve_entity("identity", "alice") == b"blob"

    @pytest.mark.asyncio
    async def test_not_open(self, channel_id):
        """Test operations before open() fail."""
        storage = Storage()
        with pytest.raises(StoreNotOpenError):
            await storage.get_message_count(channel_id)

    @pytest.mark.asyncio
    async def test_double_open(self, storage):
        """Test opening an open store fails."""
        with pytest.raises(StoreAlreadyOpenError):
            await storage.open()

    @pytest.mark.asyncio
    async def test_unwritable_location(self, tmp_path):
        """Test open() fails fast when the location cannot be created."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        storage = Storage(StorageConfig(file=str(blocker / "store.db")))
        with pytest.raises(OSError):
            await storage.open()
        assert not storage.db.is_open

    @pytest.mark.parametrize("count", [0, -1, 999, 5000])
    def test_invalid_variable_count(self, count):
        """Test batch sizes outside the engine's variable limit are refused."""
        with pytest.raises(InvalidParameterError):
            Storage(StorageConfig(max_variable_count=count))

    def test_largest_variable_count_accepted(self):
        """Test the largest batch size the config accepts is usable by Storage."""
        config = StorageConfig(max_variable_count=998)
        assert config.validate() == []
        assert Storage(config).messages.max_variable_count == 998


class TestVersionPolicy:
    """Tests for the schema version marker."""

    @pytest.mark.asyncio
    async def test_version_written(self, storage):
        """Test a new store is stamped with the current version."""
        assert await storage.get_version() == CURRENT_VERSION

    @pytest.mark.asyncio
    async def test_older_version_wipes(self, tmp_path, channel_id):
        """Test any older stored version erases messages, edges and entities."""
        config = StorageConfig(file=str(tmp_path / "store.db"))

        async with Storage(config) as storage:
            await populate(storage, channel_id)
            await storage.add_message(Message(channel_id, b"b", 1, [b"a"], b"child"))
            await storage.db.execute(f"PRAGMA user_version = {CURRENT_VERSION - 1}")

        async with Storage(config) as storage:
            assert await storage.get_version() == CURRENT_VERSION
            assert await storage.get_message_count(channel_id) == 0
            assert await storage.get_entity_count() == 0

            # No stale edge may hide a re-added parent
            await storage.add_message(Message(channel_id, b"a", 0, [], b"root"))
            assert await storage.get_leaf_hashes(channel_id) == [b"a"]

    @pytest.mark.asyncio
    async def test_newer_version_kept(self, tmp_path, channel_id, caplog):
        """Test a newer stored version is left alone with a warning."""
        config = StorageConfig(file=str(tmp_path / "store.db"))

        async with Storage(config) as storage:
            await populate(storage, channel_id)
            await storage.db.execute(f"PRAGMA user_version = {CURRENT_VERSION + 1}")

        caplog.set_level(logging.WARNING, logger="dagstore.storage.schema")
        async with Storage(config) as storage:
            assert await storage.get_version() == CURRENT_VERSION + 1
            assert await storage.get_message_count(channel_id) == 1

        assert "newer than supported" in caplog.text


class TestClear:
    """Tests for full-store clear."""

    @pytest.mark.asyncio
    async def test_clear(self, storage, channel_id, other_channel_id):
        """Test clear erases every channel and every entity."""
        await populate(storage, channel_id)
        await populate(storage, other_channel_id)

        await storage.clear()

        assert await storage.get_message_count(channel_id) == 0
        assert await storage.get_message_count(other_channel_id) == 0
        assert await storage.get_entity_count() == 0
        assert await storage.get_version() == CURRENT_VERSION


class TestTrace:
    """Tests for statement tracing."""

    @pytest.mark.asyncio
    async def test_trace_logs_statements(self, channel_id, caplog):
        """Test traced stores log executed SQL on the trace logger."""
        caplog.set_level(logging.DEBUG, logger="dagstore.trace")

        async with Storage(StorageConfig(trace=True)) as storage:
            await storage.add_message(Message(channel_id, b"a", 0))

        traced = [r.getMessage() for r in caplog.records if r.name == "dagstore.trace"]
        assert any("REPLACE INTO messages" in statement for statement in traced)


class TestTransactions:
    """Tests for transaction recovery."""

    @pytest.mark.asyncio
    async def test_failed_commit_is_rolled_back(self, storage, channel_id):
        """Test a COMMIT failure leaves the store usable for later writes."""
        await storage.db.execute("PRAGMA foreign_keys = ON")
        await storage.db.execute("CREATE TABLE owners (id INTEGER PRIMARY KEY)")
        await storage.db.execute(
            "CREATE TABLE pets (owner INTEGER REFERENCES owners (id) "
            "DEFERRABLE INITIALLY DEFERRED)"
        )

        # Deferred foreign keys are only checked at COMMIT
        with pytest.raises(sqlite3.IntegrityError):
            async with storage.db.transaction() as conn:
                await conn.execute("INSERT INTO pets (owner) VALUES (1)")

        assert await storage.db.fetchcolumn("SELECT COUNT(*) FROM pets") == [0]

        await storage.add_message(Message(channel_id, b"a", 0))
        assert await storage.has_message(channel_id, b"a")
