"""
DAG Store Persistence Layer
"""

from dagstore.storage.database import Database
from dagstore.storage.entities import EntityStore
from dagstore.storage.messages import MessageStore
from dagstore.storage.query import CursorQuery, paginate
from dagstore.storage.store import Storage

__all__ = [
    "Database",
    "EntityStore",
    "MessageStore",
    "CursorQuery",
    "paginate",
    "Storage",
]
