from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Callable

from .address import AddressDeriver
from .errors import Unauthorized
from .models import Address, Owner, Refund, TaskRecord, TaskRef
from .repositories import RecordStore, get_record_store
from .settings import get_settings
from .validation import validate_description, validate_title

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def _unix_now() -> int:
    return int(time.time())


# PUBLIC_INTERFACE
class TaskLifecycle:
    """
    Orchestrates create, update, complete and delete for tasks.

    A task lives at the address derived from (owner, title). Update and
    complete are gated by that derivation alone: a caller can only compute
    the address of their own task. Delete additionally checks that the stored
    owner equals the caller.

    Validation and authorization always run before the store is touched, so a
    failed operation leaves the existing record unchanged.
    """

    def __init__(self, store: RecordStore, deriver: AddressDeriver, clock: Clock = _unix_now) -> None:
        self._store = store
        self._deriver = deriver
        self._clock = clock

    @property
    def store(self) -> RecordStore:
        return self._store

    def address_of(self, owner: Owner, title: str) -> Address:
        return self._deriver.derive(owner, title)

    def create(self, owner: Owner, title: str, description: str) -> TaskRef:
        validate_title(title)
        validate_description(description)
        address = self.address_of(owner, title)

        record: TaskRecord = {
            "owner": owner,
            "title": title,
            "description": description,
            "completed": False,
            "created_at": self._clock(),
        }
        self._store.create(address, record, payer=owner)
        logger.info(
            "Task created, Title: %s, Owner: %s, Created at: %s",
            title,
            owner,
            record["created_at"],
        )
        return TaskRef(address=address, record=record)

    def get(self, owner: Owner, title: str) -> TaskRef:
        address = self.address_of(owner, title)
        return TaskRef(address=address, record=self._store.read(address))

    def read(self, address: Address) -> TaskRecord:
        return self._store.read(address)

    def update(self, owner: Owner, title: str, description: str) -> TaskRef:
        address = self.address_of(owner, title)
        validate_description(description)

        def _set_description(record: TaskRecord) -> None:
            record["description"] = description

        record = self._store.modify(address, _set_description)
        logger.info("Task description updated, Title: %s, Owner: %s", record["title"], record["owner"])
        return TaskRef(address=address, record=record)

    def complete(self, owner: Owner, title: str) -> TaskRef:
        address = self.address_of(owner, title)

        # idempotent: completing twice is a successful no-op
        def _mark_completed(record: TaskRecord) -> None:
            record["completed"] = True

        record = self._store.modify(address, _mark_completed)
        logger.info("Task marked complete, Title: %s, Owner: %s", record["title"], record["owner"])
        return TaskRef(address=address, record=record)

    def delete(self, owner: Owner, title: str) -> Refund:
        address = self.address_of(owner, title)
        record = self._store.read(address)
        if record["owner"] != owner:
            logger.warning("Delete rejected, Title: %s, Owner: %s, Caller: %s", record["title"], record["owner"], owner)
            raise Unauthorized()

        refund = self._store.delete(address, beneficiary=owner)
        logger.info(
            "Task deleted, Title: %s, Owner: %s, Refunded: %s",
            record["title"],
            record["owner"],
            refund.amount,
        )
        return refund


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_lifecycle() -> TaskLifecycle:
    """Return the process-wide lifecycle controller built from settings."""
    settings = get_settings()
    deriver = AddressDeriver(settings.task_namespace.encode("utf-8"))
    return TaskLifecycle(get_record_store(), deriver)
