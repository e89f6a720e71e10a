"""
DAG Store
Persistence and query layer for per-channel message DAGs

Messages are stored with their parent edges, DAG leaves are derived from
those edges, and every channel is readable in a deterministic CRDT order
(height, then hash) with cursor pagination in both directions.
"""

__version__ = "2.0.0"

from dagstore.constants import CURRENT_VERSION, MAX_VARIABLE_COUNT
from dagstore.config import StorageConfig, StoreConfig
from dagstore.core.types import AbbreviatedMessage, Cursor, Message, QueryResult
from dagstore.errors import (
    DagStoreError,
    ErrorCode,
    HashDecodingError,
    HashEncodingError,
    InvalidCursorError,
    StoreNotOpenError,
    UnsupportedQueryError,
)
from dagstore.storage.store import Storage

__all__ = [
    "CURRENT_VERSION",
    "MAX_VARIABLE_COUNT",
    "StorageConfig",
    "StoreConfig",
    "AbbreviatedMessage",
    "Cursor",
    "Message",
    "QueryResult",
    "DagStoreError",
    "ErrorCode",
    "HashDecodingError",
    "HashEncodingError",
    "InvalidCursorError",
    "StoreNotOpenError",
    "UnsupportedQueryError",
    "Storage",
    "__version__",
]
