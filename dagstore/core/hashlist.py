"""
DAG Store Hash List Codec

Parent hash lists are stored as a single BLOB:

    len_0 || hash_0 || len_1 || hash_1 || ...

where each len_i is one unsigned byte. Hashes longer than 255 bytes cannot be
represented and are rejected.
"""

from __future__ import annotations
from typing import Iterable, List

from dagstore.constants import HASH_LENGTH_PREFIX_SIZE, MAX_HASH_LENGTH
from dagstore.errors import HashEncodingError, HashDecodingError


def encode_hash_list(hashes: Iterable[bytes]) -> bytes:
    """Encode hashes into a length-prefixed buffer."""
    hashes = list(hashes)

    size = 0
    for elem in hashes:
        if len(elem) > MAX_HASH_LENGTH:
            raise HashEncodingError(len(elem), MAX_HASH_LENGTH)
        size += HASH_LENGTH_PREFIX_SIZE + len(elem)

    result = bytearray(size)
    offset = 0
    for elem in hashes:
        result[offset] = len(elem)
        offset += HASH_LENGTH_PREFIX_SIZE

        result[offset:offset + len(elem)] = elem
        offset += len(elem)

    return bytes(result)


def decode_hash_list(data: bytes) -> List[bytes]:
    """Decode a buffer produced by encode_hash_list()."""
    result = []
    offset = 0
    while offset < len(data):
        length = data[offset]
        offset += HASH_LENGTH_PREFIX_SIZE

        if offset + length > len(data):
            raise HashDecodingError(offset, length, len(data) - offset)

        result.append(bytes(data[offset:offset + length]))
        offset += length

    return result
