"""
Fingerprints: uppercase hex SHA-1 digests of files, streams, strings and structured values.

SHA-1 is used for its short digest, not for cryptographic strength. All entry points use
the same algorithm, so the hash of a file equals the hash of a stream or string with the
same bytes.

Hasher objects are stateful, so every call gets a fresh one from _create_hasher and
nothing is shared between calls.
"""

import hashlib
from os import PathLike
from typing import Any, BinaryIO

from projectcache.codec import serialize

CHUNK_SIZE = 1024 * 1024


def _create_hasher():
    return hashlib.sha1()


def bytes_to_hex(digest: bytes) -> str:
    """Render a digest as uppercase hex without separators"""
    return digest.hex().upper()


def stream_hash(stream: BinaryIO) -> str:
    """Hash everything that can still be read from a binary stream"""
    hasher = _create_hasher()
    while chunk := stream.read(CHUNK_SIZE):
        hasher.update(chunk)
    return bytes_to_hex(hasher.digest())


def file_hash(path: str | PathLike) -> str:
    """Hash the contents of a file. Raises OSError if it cannot be opened or read"""
    with open(path, "rb") as f:
        return stream_hash(f)


def bytes_hash(data: bytes) -> str:
    hasher = _create_hasher()
    hasher.update(data)
    return bytes_to_hex(hasher.digest())


def string_hash(text: str) -> str:
    """Hash the UTF-8 encoding of a string"""
    return bytes_hash(text.encode("utf-8"))


def object_hash(value: Any) -> str:
    """
    Hash a structured value (dicts, lists, pydantic models, ...).
    The value is serialized to canonical JSON first, so equal values give equal hashes
    regardless of key order.
    """
    return bytes_hash(serialize(value))
