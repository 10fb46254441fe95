import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from src.task_api.address import AddressDeriver  # noqa: E402
from src.task_api.db import SQLiteRecordStore  # noqa: E402
from src.task_api.lifecycle import TaskLifecycle, get_lifecycle  # noqa: E402
from src.task_api.main import app  # noqa: E402
from src.task_api.models import Owner  # noqa: E402
from src.task_api.repositories import InMemoryRecordStore  # noqa: E402

FIXED_NOW = 1_735_725_600
DEPOSIT_PER_BYTE = 6960
METADATA_OVERHEAD = 128

ALICE = Owner(bytes(range(32)))
BOB = Owner(bytes(range(32, 64)))


class FakeClock:
    def __init__(self, now: int = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteRecordStore(
            str(tmp_path / "tasks.db"),
            deposit_per_byte=DEPOSIT_PER_BYTE,
            metadata_overhead=METADATA_OVERHEAD,
        )
    return InMemoryRecordStore(deposit_per_byte=DEPOSIT_PER_BYTE, metadata_overhead=METADATA_OVERHEAD)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lifecycle(store, clock):
    return TaskLifecycle(store, AddressDeriver(b"task"), clock=clock)


@pytest.fixture
def client(clock):
    lc = TaskLifecycle(
        InMemoryRecordStore(deposit_per_byte=DEPOSIT_PER_BYTE, metadata_overhead=METADATA_OVERHEAD),
        AddressDeriver(b"task"),
        clock=clock,
    )
    app.dependency_overrides[get_lifecycle] = lambda: lc
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_lifecycle, None)


@pytest.fixture
def alice():
    return ALICE


@pytest.fixture
def bob():
    return BOB


@pytest.fixture
def headers_for():
    def _headers(owner: Owner) -> dict:
        return {"X-Owner-Id": owner.hex()}

    return _headers
