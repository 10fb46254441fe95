from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import NewType, TypedDict

OWNER_KEY_SIZE = 32
_OWNER_HEX_RE = re.compile(r"^[0-9a-fA-F]{64}$")

# Lowercase hex digest produced by the address deriver.
Address = NewType("Address", str)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Owner:
    """
    Identity of the principal that created a task.

    Wraps a fixed-size (32 byte) key, the same width as a public key. Owners
    are compared by value and rendered as lowercase hex.
    """

    key: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.key, bytes) or len(self.key) != OWNER_KEY_SIZE:
            raise ValueError(f"owner key must be exactly {OWNER_KEY_SIZE} bytes")

    @classmethod
    def from_hex(cls, value: str) -> "Owner":
        """Parse exactly 64 hex characters; separators inside the value are rejected."""
        value = value.strip()
        if not _OWNER_HEX_RE.match(value):
            raise ValueError(f"owner id must be {OWNER_KEY_SIZE * 2} hex characters")
        return cls(bytes.fromhex(value))

    @classmethod
    def from_principal(cls, name: str) -> "Owner":
        """Derive a stable identity for an authenticated principal name."""
        return cls(hashlib.sha256(b"owner:" + name.encode("utf-8")).digest())

    def hex(self) -> str:
        return self.key.hex()

    def __str__(self) -> str:
        return self.hex()


# PUBLIC_INTERFACE
class TaskRecord(TypedDict):
    """
    A task as persisted at its derived address.

    Fields:
    - owner: identity of the creator, immutable
    - title: raw title (part of the address), immutable
    - description: mutable through update
    - completed: completion flag, only ever set to True
    - created_at: Unix timestamp (seconds) captured at creation
    """

    owner: Owner
    title: str
    description: str
    completed: bool
    created_at: int


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskRef:
    """A stored task together with the address it lives at."""

    address: Address
    record: TaskRecord


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Refund:
    """Storage deposit returned to ``beneficiary`` when a record is deleted."""

    beneficiary: Owner
    amount: int
