"""
DAG Store Core Data Structures
"""

from dagstore.core.types import (
    AbbreviatedMessage,
    Cursor,
    EntityFactory,
    Message,
    MessageLike,
    QueryResult,
    Serializable,
)
from dagstore.core.hashlist import encode_hash_list, decode_hash_list

__all__ = [
    # Types
    "AbbreviatedMessage",
    "Cursor",
    "EntityFactory",
    "Message",
    "MessageLike",
    "QueryResult",
    "Serializable",
    # Codec
    "encode_hash_list",
    "decode_hash_list",
]
