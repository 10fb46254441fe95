from __future__ import annotations

import hashlib
import struct

from .models import Address, Owner


def _seed(value: bytes) -> bytes:
    # 2-byte big-endian length prefix keeps seed boundaries fixed
    return struct.pack(">H", len(value)) + value


# PUBLIC_INTERFACE
def derive_address(namespace_tag: bytes, owner: Owner, title: str) -> Address:
    """
    Compute the storage address of the task identified by (owner, title).

    The address is the SHA-256 digest of the length-prefixed seeds
    ``namespace_tag``, the owner key and the raw UTF-8 title bytes. It never
    depends on mutable task fields, so the same pair always resolves to the
    same record, and only a caller presenting the right owner can reach it.

    Args:
        namespace_tag: Fixed tag separating task addresses from other records.
        owner: Identity that owns the task.
        title: Task title, used verbatim (whitespace included).

    Returns:
        The address as a lowercase hex string.
    """
    if not namespace_tag:
        raise ValueError("namespace tag must not be empty")
    h = hashlib.sha256()
    h.update(_seed(namespace_tag))
    h.update(_seed(owner.key))
    h.update(_seed(title.encode("utf-8")))
    return Address(h.hexdigest())


# PUBLIC_INTERFACE
class AddressDeriver:
    """Address derivation bound to the namespace tag fixed at startup."""

    def __init__(self, namespace_tag: bytes) -> None:
        if not namespace_tag:
            raise ValueError("namespace tag must not be empty")
        self._namespace_tag = bytes(namespace_tag)

    @property
    def namespace_tag(self) -> bytes:
        return self._namespace_tag

    def derive(self, owner: Owner, title: str) -> Address:
        return derive_address(self._namespace_tag, owner, title)
