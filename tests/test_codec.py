import struct

import pytest

from src.task_api.codec import DISCRIMINATOR, TASK_SPACE, decode_record, encode_record, storage_deposit
from src.task_api.errors import RecordDecodeError


def make_record(owner, **overrides):
    record = {
        "owner": owner,
        "title": "Buy milk",
        "description": "2%",
        "completed": False,
        "created_at": 1_735_725_600,
    }
    record.update(overrides)
    return record


class TestLayout:
    def test_task_space(self):
        assert TASK_SPACE == 8 + 32 + (4 + 100) + (4 + 1000) + 1 + 8

    def test_encoded_layout(self, alice):
        data = encode_record(make_record(alice, completed=True))
        assert len(data) == TASK_SPACE
        assert data[:8] == DISCRIMINATOR
        assert data[8:40] == alice.key
        assert data[40:44] == struct.pack("<I", 8)
        assert data[44:52] == b"Buy milk"
        assert data[52:56] == struct.pack("<I", 2)
        assert data[56:58] == b"2%"
        assert data[58] == 1
        assert struct.unpack("<q", data[59:67])[0] == 1_735_725_600
        assert set(data[67:]) == {0}

    def test_maximum_record_fits(self, alice):
        record = make_record(alice, title="t" * 100, description="d" * 1000)
        data = encode_record(record)
        assert len(data) == TASK_SPACE
        assert decode_record(data) == record

    def test_negative_timestamp_preserved(self, alice):
        record = make_record(alice, created_at=-5)
        assert decode_record(encode_record(record))["created_at"] == -5

    def test_oversized_field_rejected(self, alice):
        with pytest.raises(ValueError):
            encode_record(make_record(alice, description="d" * 1001))


class TestDecodeErrors:
    def test_foreign_discriminator(self, alice):
        data = bytearray(encode_record(make_record(alice)))
        data[0] ^= 0xFF
        with pytest.raises(RecordDecodeError):
            decode_record(bytes(data))

    def test_truncated(self, alice):
        with pytest.raises(RecordDecodeError):
            decode_record(encode_record(make_record(alice))[:50])


def test_storage_deposit():
    assert storage_deposit(6960, 128) == (128 + TASK_SPACE) * 6960
    assert storage_deposit(0, 128) == 0
