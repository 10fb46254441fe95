from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator

from .codec import decode_record, encode_record
from .errors import AlreadyExists, NotFound
from .models import Address, Owner, Refund, TaskRecord
from .repositories import Mutator, RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "task_records"
    address: str = "address"
    data: str = "data"
    deposit: str = "deposit"


_COLS = _Cols()


class SQLiteRecordStore(RecordStore):
    """
    SQLite record store implementing the RecordStore interface.

    Each call opens its own connection and runs in a single transaction. The
    primary key on ``address`` serializes concurrent creates: exactly one
    insert wins and the others observe AlreadyExists.
    """

    def __init__(self, db_path: str, deposit_per_byte: int = 0, metadata_overhead: int = 0) -> None:
        super().__init__(deposit_per_byte, metadata_overhead)
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()
        logger.info("SQLiteRecordStore ready db=%s", db_path)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, timeout=30.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.address} TEXT PRIMARY KEY,
                    {_COLS.data} BLOB NOT NULL,
                    {_COLS.deposit} INTEGER NOT NULL DEFAULT 0
                )
                """
            )

    def exists(self, address: Address) -> bool:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT 1 FROM {_COLS.table} WHERE {_COLS.address} = ?", (address,)
            ).fetchone()
            return row is not None

    def create(self, address: Address, record: TaskRecord, payer: Owner) -> None:
        data = encode_record(record)
        try:
            with self._conn() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {_COLS.table} ({_COLS.address}, {_COLS.data}, {_COLS.deposit})
                    VALUES (?, ?, ?)
                    """,
                    (address, data, self.deposit),
                )
        except sqlite3.IntegrityError as e:
            raise AlreadyExists() from e
        logger.debug("Allocated slot address=%s payer=%s deposit=%s", address, payer, self.deposit)

    def read(self, address: Address) -> TaskRecord:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.data} FROM {_COLS.table} WHERE {_COLS.address} = ?", (address,)
            ).fetchone()
        if row is None:
            raise NotFound()
        return decode_record(bytes(row[_COLS.data]))

    def write(self, address: Address, record: TaskRecord) -> None:
        data = encode_record(record)
        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE {_COLS.table} SET {_COLS.data} = ? WHERE {_COLS.address} = ?",
                (data, address),
            )
            if cur.rowcount == 0:
                raise NotFound()

    def modify(self, address: Address, mutate: Mutator) -> TaskRecord:
        # BEGIN IMMEDIATE holds the write lock from the SELECT through the UPDATE
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.data} FROM {_COLS.table} WHERE {_COLS.address} = ?", (address,)
            ).fetchone()
            if row is None:
                raise NotFound()
            record = decode_record(bytes(row[_COLS.data]))
            mutate(record)
            conn.execute(
                f"UPDATE {_COLS.table} SET {_COLS.data} = ? WHERE {_COLS.address} = ?",
                (encode_record(record), address),
            )
        return record

    def delete(self, address: Address, beneficiary: Owner) -> Refund:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.deposit} FROM {_COLS.table} WHERE {_COLS.address} = ?", (address,)
            ).fetchone()
            if row is None:
                raise NotFound()
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.address} = ?", (address,))
        return Refund(beneficiary=beneficiary, amount=int(row[_COLS.deposit]))
