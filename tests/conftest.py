"""
DAG Store Test Fixtures
"""

import os
from typing import Callable, Sequence

import pytest
import pytest_asyncio

from dagstore import Message, Storage, StorageConfig


@pytest.fixture
def channel_id() -> bytes:
    """Random 32-byte channel id."""
    return os.urandom(32)


@pytest.fixture
def other_channel_id() -> bytes:
    """A second channel id."""
    return os.urandom(32)


@pytest.fixture
def msg(channel_id) -> Callable[..., Message]:
    """
    Build a message whose hash is the given text and whose payload is
    '<height>: <hash>'.
    """
    def make(hash: str, height: int, parents: Sequence[str] = (), channel: bytes = None) -> Message:
        return Message(
            channel_id=channel if channel is not None else channel_id,
            hash=hash.encode(),
            height=height,
            parents=[parent.encode() for parent in parents],
            data=f"{height}: {hash}".encode(),
        )
    return make


@pytest_asyncio.fixture
async def storage():
    """Open storage backed by a temporary file."""
    store = Storage()
    await store.open()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def crdt_storage(storage, msg):
    """
    Storage holding a(0), c(1), b(1), d(2), inserted out of CRDT order.

    No parent edges: only ordering is exercised.
    """
    await storage.add_message(msg("a", 0))
    await storage.add_message(msg("c", 1))
    await storage.add_message(msg("b", 1))
    await storage.add_message(msg("d", 2))
    return storage
