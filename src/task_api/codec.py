"""
Binary layout of a persisted task record.

Layout (little-endian)::

    discriminator   8 bytes   sha256(b"account:Task")[:8]
    owner          32 bytes
    title           u32 length + UTF-8 bytes (<= 100)
    description     u32 length + UTF-8 bytes (<= 1000)
    completed       1 byte
    created_at      i64

Every record occupies a fixed slot of ``TASK_SPACE`` bytes, zero padded, so
the storage reserved at creation never has to grow when the description is
updated.
"""
from __future__ import annotations

import hashlib
import struct

from .errors import RecordDecodeError
from .models import OWNER_KEY_SIZE, Owner, TaskRecord
from .validation import MAX_DESCRIPTION_BYTES, MAX_TITLE_BYTES

DISCRIMINATOR = hashlib.sha256(b"account:Task").digest()[:8]
_LEN = struct.Struct("<I")
_TAIL = struct.Struct("<?q")

TASK_SPACE = (
    len(DISCRIMINATOR)
    + OWNER_KEY_SIZE
    + _LEN.size + MAX_TITLE_BYTES
    + _LEN.size + MAX_DESCRIPTION_BYTES
    + _TAIL.size
)


# PUBLIC_INTERFACE
def encode_record(record: TaskRecord) -> bytes:
    """Serialize a record into a zero-padded buffer of ``TASK_SPACE`` bytes."""
    title = record["title"].encode("utf-8")
    description = record["description"].encode("utf-8")
    if len(title) > MAX_TITLE_BYTES or len(description) > MAX_DESCRIPTION_BYTES:
        raise ValueError("record fields exceed the reserved space")

    buf = b"".join(
        [
            DISCRIMINATOR,
            record["owner"].key,
            _LEN.pack(len(title)),
            title,
            _LEN.pack(len(description)),
            description,
            _TAIL.pack(bool(record["completed"]), int(record["created_at"])),
        ]
    )
    return buf.ljust(TASK_SPACE, b"\x00")


def _read_str(data: bytes, offset: int, limit: int) -> tuple[str, int]:
    if offset + _LEN.size > len(data):
        raise RecordDecodeError("buffer truncated")
    (length,) = _LEN.unpack_from(data, offset)
    offset += _LEN.size
    if length > limit or offset + length > len(data):
        raise RecordDecodeError("string length out of range")
    try:
        value = data[offset:offset + length].decode("utf-8")
    except UnicodeDecodeError as e:
        raise RecordDecodeError("string is not valid UTF-8") from e
    return value, offset + length


# PUBLIC_INTERFACE
def decode_record(data: bytes) -> TaskRecord:
    """
    Parse a buffer produced by ``encode_record``.

    Raises:
        RecordDecodeError: on a foreign discriminator or a malformed buffer.
    """
    head = len(DISCRIMINATOR)
    if data[:head] != DISCRIMINATOR:
        raise RecordDecodeError("not a task record")
    offset = head
    if offset + OWNER_KEY_SIZE > len(data):
        raise RecordDecodeError("buffer truncated")
    owner = Owner(bytes(data[offset:offset + OWNER_KEY_SIZE]))
    offset += OWNER_KEY_SIZE

    title, offset = _read_str(data, offset, MAX_TITLE_BYTES)
    description, offset = _read_str(data, offset, MAX_DESCRIPTION_BYTES)

    if offset + _TAIL.size > len(data):
        raise RecordDecodeError("buffer truncated")
    completed, created_at = _TAIL.unpack_from(data, offset)
    return {
        "owner": owner,
        "title": title,
        "description": description,
        "completed": completed,
        "created_at": created_at,
    }


# PUBLIC_INTERFACE
def storage_deposit(deposit_per_byte: int, metadata_overhead: int, space: int = TASK_SPACE) -> int:
    """Deposit charged for holding ``space`` bytes plus the substrate's metadata header."""
    return (metadata_overhead + space) * deposit_per_byte
