from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Callable, Dict, Tuple

from .codec import TASK_SPACE, decode_record, encode_record, storage_deposit
from .errors import AlreadyExists, NotFound
from .models import Address, Owner, Refund, TaskRecord
from .settings import get_settings

logger = logging.getLogger(__name__)

Mutator = Callable[[TaskRecord], None]


# PUBLIC_INTERFACE
class RecordStore(ABC):
    """
    Abstract contract for the persistence substrate holding task records.

    Records are keyed by their derived address. Every operation is atomic for
    a single record: no partial write is ever observable.
    """

    def __init__(self, deposit_per_byte: int = 0, metadata_overhead: int = 0) -> None:
        self._deposit = storage_deposit(deposit_per_byte, metadata_overhead, TASK_SPACE)

    @property
    def deposit(self) -> int:
        """Deposit charged for each record slot."""
        return self._deposit

    @abstractmethod
    def exists(self, address: Address) -> bool:
        """Return True if a record is stored at address."""

    @abstractmethod
    def create(self, address: Address, record: TaskRecord, payer: Owner) -> None:
        """Store a new record, charging the slot deposit to payer. Raise AlreadyExists if occupied."""

    @abstractmethod
    def read(self, address: Address) -> TaskRecord:
        """Return the record at address. Raise NotFound if absent."""

    @abstractmethod
    def write(self, address: Address, record: TaskRecord) -> None:
        """Replace the record at address. Raise NotFound if absent."""

    @abstractmethod
    def modify(self, address: Address, mutate: Mutator) -> TaskRecord:
        """
        Read, mutate in place and store the record at address as one atomic step.
        Return the stored record. Raise NotFound if absent.
        """

    @abstractmethod
    def delete(self, address: Address, beneficiary: Owner) -> Refund:
        """Remove the record at address and return its deposit to beneficiary. Raise NotFound if absent."""


class InMemoryRecordStore(RecordStore):
    """
    Thread-safe in-memory record store suitable for testing and default runtime.

    Records are kept in their encoded form, exactly as a persistent backend
    would hold them.
    """

    def __init__(self, deposit_per_byte: int = 0, metadata_overhead: int = 0) -> None:
        super().__init__(deposit_per_byte, metadata_overhead)
        self._lock = RLock()
        self._slots: Dict[Address, Tuple[bytes, int]] = {}

    def exists(self, address: Address) -> bool:
        with self._lock:
            return address in self._slots

    def create(self, address: Address, record: TaskRecord, payer: Owner) -> None:
        data = encode_record(record)
        with self._lock:
            if address in self._slots:
                raise AlreadyExists()
            self._slots[address] = (data, self._deposit)
        logger.debug("Allocated slot address=%s payer=%s deposit=%s", address, payer, self._deposit)

    def read(self, address: Address) -> TaskRecord:
        with self._lock:
            slot = self._slots.get(address)
        if slot is None:
            raise NotFound()
        return decode_record(slot[0])

    def write(self, address: Address, record: TaskRecord) -> None:
        data = encode_record(record)
        with self._lock:
            slot = self._slots.get(address)
            if slot is None:
                raise NotFound()
            self._slots[address] = (data, slot[1])

    def modify(self, address: Address, mutate: Mutator) -> TaskRecord:
        with self._lock:
            slot = self._slots.get(address)
            if slot is None:
                raise NotFound()
            record = decode_record(slot[0])
            mutate(record)
            self._slots[address] = (encode_record(record), slot[1])
            return record

    def delete(self, address: Address, beneficiary: Owner) -> Refund:
        with self._lock:
            slot = self._slots.pop(address, None)
        if slot is None:
            raise NotFound()
        return Refund(beneficiary=beneficiary, amount=slot[1])


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    """
    Factory to return the configured record store based on settings.
    - memory: InMemoryRecordStore
    - sqlite: SQLiteRecordStore

    The store is created once per process; call ``get_record_store.cache_clear()``
    to rebuild it after changing settings.
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRecordStore

        return SQLiteRecordStore(
            settings.sqlite_db_path,
            deposit_per_byte=settings.storage_deposit_per_byte,
            metadata_overhead=settings.storage_metadata_overhead,
        )
    return InMemoryRecordStore(
        deposit_per_byte=settings.storage_deposit_per_byte,
        metadata_overhead=settings.storage_metadata_overhead,
    )
