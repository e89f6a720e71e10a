"""
DAG Store Core Types

Collaborator contracts consumed by the stores and the values they return.

Messages are supplied by the protocol layer; the store only reads
channel_id, hash, height, parents and the serialized payload. Entities are
opaque: the caller passes a serializer in and a factory out.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence, Tuple, TypeVar, runtime_checkable

from dagstore.errors import InvalidCursorError

T = TypeVar("T")


# ==============================================================================
# CAPABILITIES
# ==============================================================================

@runtime_checkable
class Serializable(Protocol):
    """Anything that produces its own payload bytes."""

    def serialize_data(self) -> bytes: ...


@runtime_checkable
class MessageLike(Serializable, Protocol):
    """Message contract expected by MessageStore.add_message()."""

    channel_id: bytes
    hash: bytes
    height: int
    parents: Sequence[bytes]


# Reconstructs an entity from the bytes its serialize_data() produced.
EntityFactory = Callable[[bytes], T]


# ==============================================================================
# MESSAGE
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Message:
    """
    Plain message record.

    Height is trusted as given: the store persists it exactly and never
    derives it from the parents.
    """
    channel_id: bytes
    hash: bytes
    height: int
    parents: Tuple[bytes, ...] = ()
    data: bytes = b""

    def __post_init__(self):
        if self.height < 0:
            raise ValueError(f"Message height must be non-negative, got {self.height}")
        # parents is always stored as a tuple
        object.__setattr__(self, "parents", tuple(self.parents))

    def __repr__(self) -> str:
        return f"Message({self.hash.hex()[:16]}, height={self.height}, parents={len(self.parents)})"

    def serialize_data(self) -> bytes:
        return self.data


# ==============================================================================
# QUERY
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Cursor:
    """
    Pagination anchor: a known message hash or a height.

    Exactly one of the two is set.
    """
    hash: Optional[bytes] = None
    height: Optional[int] = None

    def __post_init__(self):
        if (self.hash is None) == (self.height is None):
            raise InvalidCursorError("exactly one of hash or height must be set")
        if self.height is not None and self.height < 0:
            raise InvalidCursorError(f"negative height {self.height}")

    @classmethod
    def at_hash(cls, message_hash: bytes) -> Cursor:
        return cls(hash=message_hash)

    @classmethod
    def at_height(cls, height: int) -> Cursor:
        return cls(height=height)

    @property
    def is_hash(self) -> bool:
        return self.hash is not None


@dataclass(frozen=True, slots=True)
class AbbreviatedMessage:
    """Message identity and parents, without the payload."""
    hash: bytes
    parents: Tuple[bytes, ...]

    def __post_init__(self):
        object.__setattr__(self, "parents", tuple(self.parents))


@dataclass(slots=True)
class QueryResult:
    """One page in CRDT order plus continuation cursors."""
    page: List[AbbreviatedMessage] = field(default_factory=list)
    backward_hash: Optional[bytes] = None
    forward_hash: Optional[bytes] = None

    @property
    def hashes(self) -> List[bytes]:
        return [message.hash for message in self.page]

    def to_dict(self) -> dict:
        """Export as a JSON-friendly dict with hex-encoded hashes."""
        return {
            "page": [
                {
                    "hash": message.hash.hex(),
                    "parents": [parent.hex() for parent in message.parents],
                }
                for message in self.page
            ],
            "backward_hash": self.backward_hash.hex() if self.backward_hash is not None else None,
            "forward_hash": self.forward_hash.hex() if self.forward_hash is not None else None,
        }
