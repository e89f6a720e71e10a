"""
DAG Store Storage Facade

One object owning the database lifecycle and exposing the message, query and
entity operations as coroutines.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence, TypeVar

from dagstore.config import StorageConfig
from dagstore.core.types import Cursor, EntityFactory, MessageLike, QueryResult, Serializable
from dagstore.errors import InvalidParameterError
from dagstore.storage import schema
from dagstore.storage.database import Database
from dagstore.storage.entities import EntityStore
from dagstore.storage.messages import MessageStore
from dagstore.storage.query import CursorQuery

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Storage:
    """
    SQLite-backed storage for channel message DAGs and entities.

    Usage:
        async with Storage(StorageConfig(file="node.db")) as storage:
            await storage.add_message(message)
            leaves = await storage.get_leaf_hashes(channel_id)
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        self.config = config or StorageConfig()
        errors = self.config.validate()
        if errors:
            raise InvalidParameterError("storage", "; ".join(errors))

        self.db = Database(self.config.path, trace=self.config.trace)
        self.messages = MessageStore(self.db, self.config.max_variable_count)
        self.cursors = CursorQuery(self.db)
        self.entities = EntityStore(self.db)

    async def __aenter__(self) -> "Storage":
        await self.open()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def open(self):
        """Open the database, ensure the schema and apply the version policy."""
        await self.db.open()
        try:
            await schema.ensure_schema(self.db)
        except Exception:
            await self.db.close()
            raise

    async def close(self):
        await self.db.close()

    async def clear(self):
        """Erase all messages and entities."""
        await schema.wipe(self.db)
        logger.info("Storage cleared")

    async def get_version(self) -> int:
        return await schema.get_version(self.db)

    # =========================================================================
    # Messages
    # =========================================================================

    async def add_message(self, message: MessageLike):
        await self.messages.add_message(message)

    async def get_message_count(self, channel_id: bytes) -> int:
        return await self.messages.get_message_count(channel_id)

    async def get_leaf_hashes(self, channel_id: bytes) -> List[bytes]:
        return await self.messages.get_leaf_hashes(channel_id)

    async def get_leaves(self, channel_id: bytes) -> List[bytes]:
        return await self.messages.get_leaves(channel_id)

    async def has_message(self, channel_id: bytes, message_hash: bytes) -> bool:
        return await self.messages.has_message(channel_id, message_hash)

    async def get_message(self, channel_id: bytes, message_hash: bytes) -> Optional[bytes]:
        return await self.messages.get_message(channel_id, message_hash)

    async def get_message_at_offset(self, channel_id: bytes, offset: int) -> Optional[bytes]:
        return await self.messages.get_message_at_offset(channel_id, offset)

    async def get_messages(
        self,
        channel_id: bytes,
        hashes: Sequence[bytes],
    ) -> List[Optional[bytes]]:
        return await self.messages.get_messages(channel_id, hashes)

    async def get_hashes_at_offset(self, channel_id: bytes, offset: int, limit: int) -> List[bytes]:
        return await self.messages.get_hashes_at_offset(channel_id, offset, limit)

    async def get_reverse_hashes_at_offset(
        self,
        channel_id: bytes,
        offset: int,
        limit: int,
    ) -> List[bytes]:
        return await self.messages.get_reverse_hashes_at_offset(channel_id, offset, limit)

    async def query(
        self,
        channel_id: bytes,
        cursor: Cursor,
        is_backward: bool,
        limit: int,
    ) -> QueryResult:
        return await self.cursors.query(channel_id, cursor, is_backward, limit)

    async def remove_channel_messages(self, channel_id: bytes):
        await self.messages.remove_channel_messages(channel_id)

    # =========================================================================
    # Entities (Identity, ChannelList, ...)
    # =========================================================================

    async def store_entity(self, prefix: str, entity_id: str, blob: bytes):
        await self.entities.store_entity(prefix, entity_id, blob)

    async def retrieve_entity(self, prefix: str, entity_id: str) -> Optional[bytes]:
        return await self.entities.retrieve_entity(prefix, entity_id)

    async def remove_entity(self, prefix: str, entity_id: str):
        await self.entities.remove_entity(prefix, entity_id)

    async def get_entity_keys(self, prefix: str) -> List[str]:
        return await self.entities.get_entity_keys(prefix)

    async def get_entity_count(self) -> int:
        return await self.entities.get_entity_count()

    async def store_entity_object(self, prefix: str, entity_id: str, entity: Serializable):
        """Serialize and store an entity."""
        await self.entities.store_entity(prefix, entity_id, entity.serialize_data())

    async def retrieve_entity_object(
        self,
        prefix: str,
        entity_id: str,
        factory: EntityFactory[T],
    ) -> Optional[T]:
        """Load an entity and rebuild it with `factory`, or None if absent."""
        blob = await self.entities.retrieve_entity(prefix, entity_id)
        if blob is None:
            return None
        return factory(blob)
