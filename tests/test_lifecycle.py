import logging
import threading
import time

import pytest

from src.task_api.address import derive_address
from src.task_api.errors import (
    AlreadyExists,
    DescriptionEmpty,
    DescriptionTooLong,
    NotFound,
    TitleEmpty,
    TitleTooLong,
    Unauthorized,
)


class TestCreate:
    @pytest.mark.parametrize(
        "title,description",
        [("Buy milk", "2%"), ("  spaced  ", " keep whitespace "), ("t" * 100, "d" * 1000), ("Café", "naïve")],
    )
    def test_round_trip(self, lifecycle, store, alice, clock, title, description):
        ref = lifecycle.create(alice, title, description)
        assert ref.address == derive_address(b"task", alice, title)
        record = store.read(ref.address)
        assert record == {
            "owner": alice,
            "title": title,
            "description": description,
            "completed": False,
            "created_at": clock.now,
        }

    @pytest.mark.parametrize(
        "title,description,error",
        [
            ("   ", "ok", TitleEmpty),
            ("x" * 101, "ok", TitleTooLong),
            ("ok", "", DescriptionEmpty),
            ("ok", "d" * 1001, DescriptionTooLong),
        ],
    )
    def test_validation_failures_store_nothing(self, lifecycle, store, alice, title, description, error):
        with pytest.raises(error):
            lifecycle.create(alice, title, description)
        assert store.exists(derive_address(b"task", alice, title)) is False

    def test_title_checked_before_description(self, lifecycle, alice):
        with pytest.raises(TitleEmpty):
            lifecycle.create(alice, "", "")

    def test_duplicate_fails_and_keeps_first(self, lifecycle, store, alice, clock):
        first = lifecycle.create(alice, "Buy milk", "2%")
        clock.now += 60
        with pytest.raises(AlreadyExists):
            lifecycle.create(alice, "Buy milk", "whole")
        assert store.read(first.address) == first.record

    def test_same_title_different_owners(self, lifecycle, alice, bob):
        a = lifecycle.create(alice, "Buy milk", "2%")
        b = lifecycle.create(bob, "Buy milk", "skim")
        assert a.address != b.address

    def test_emits_creation_log(self, lifecycle, alice, caplog):
        with caplog.at_level(logging.INFO, logger="src.task_api.lifecycle"):
            lifecycle.create(alice, "Buy milk", "2%")
        assert any("Task created" in r.getMessage() and alice.hex() in r.getMessage() for r in caplog.records)


class TestUpdate:
    def test_missing(self, lifecycle, alice):
        with pytest.raises(NotFound):
            lifecycle.update(alice, "Nope", "whatever")

    def test_changes_description_only(self, lifecycle, store, alice, clock):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        lifecycle.complete(alice, "Buy milk")
        before = store.read(ref.address)
        clock.now += 3600

        updated = lifecycle.update(alice, "Buy milk", "whole")

        after = store.read(ref.address)
        assert updated.record == after
        assert after["description"] == "whole"
        for key in ("owner", "title", "completed", "created_at"):
            assert after[key] == before[key]

    def test_invalid_description_leaves_record(self, lifecycle, store, alice):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        with pytest.raises(DescriptionEmpty):
            lifecycle.update(alice, "Buy milk", "   ")
        with pytest.raises(DescriptionTooLong):
            lifecycle.update(alice, "Buy milk", "d" * 1001)
        assert store.read(ref.address)["description"] == "2%"

    def test_other_owner_cannot_reach_task(self, lifecycle, store, alice, bob):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        with pytest.raises(NotFound):
            lifecycle.update(bob, "Buy milk", "hijacked")
        assert store.read(ref.address)["description"] == "2%"


class TestComplete:
    def test_missing(self, lifecycle, alice):
        with pytest.raises(NotFound):
            lifecycle.complete(alice, "Nope")

    def test_idempotent(self, lifecycle, store, alice):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        assert lifecycle.complete(alice, "Buy milk").record["completed"] is True
        assert lifecycle.complete(alice, "Buy milk").record["completed"] is True
        assert store.read(ref.address)["completed"] is True

    def test_other_owner_cannot_complete(self, lifecycle, store, alice, bob):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        with pytest.raises(NotFound):
            lifecycle.complete(bob, "Buy milk")
        assert store.read(ref.address)["completed"] is False


class TestDelete:
    def test_missing(self, lifecycle, alice):
        with pytest.raises(NotFound):
            lifecycle.delete(alice, "Nope")

    def test_owner_deletes_and_is_refunded(self, lifecycle, store, alice):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        refund = lifecycle.delete(alice, "Buy milk")
        assert refund.beneficiary == alice
        assert refund.amount == store.deposit
        with pytest.raises(NotFound):
            store.read(ref.address)

    def test_non_owner_sees_not_found_through_derivation(self, lifecycle, store, alice, bob):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        with pytest.raises(NotFound):
            lifecycle.delete(bob, "Buy milk")
        assert store.exists(ref.address)

    def test_stored_owner_mismatch_is_unauthorized(self, lifecycle, store, alice, bob):
        # a record whose stored owner differs from the owner folded into its address
        address = lifecycle.address_of(bob, "Buy milk")
        store.create(
            address,
            {"owner": alice, "title": "Buy milk", "description": "2%", "completed": False, "created_at": 0},
            payer=alice,
        )
        with pytest.raises(Unauthorized):
            lifecycle.delete(bob, "Buy milk")
        assert store.read(address)["owner"] == alice

    def test_recreate_after_delete(self, lifecycle, alice):
        lifecycle.create(alice, "Buy milk", "2%")
        lifecycle.delete(alice, "Buy milk")
        ref = lifecycle.create(alice, "Buy milk", "oat")
        assert ref.record["description"] == "oat"


class TestConcurrentMutations:
    def test_update_and_complete_do_not_lose_changes(self, lifecycle, store, alice, monkeypatch):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        entered = threading.Event()
        release = threading.Event()
        modify = store.modify

        def pausing_modify(address, mutate):
            if threading.current_thread().name != "updater":
                return modify(address, mutate)

            def _paused(record):
                entered.set()
                release.wait(5)
                mutate(record)

            return modify(address, _paused)

        monkeypatch.setattr(store, "modify", pausing_modify)

        updater = threading.Thread(target=lifecycle.update, args=(alice, "Buy milk", "whole"), name="updater")
        completer = threading.Thread(target=lifecycle.complete, args=(alice, "Buy milk"), name="completer")
        updater.start()
        assert entered.wait(5)
        completer.start()
        time.sleep(0.2)
        release.set()
        updater.join(10)
        completer.join(10)

        record = store.read(ref.address)
        assert record["description"] == "whole"
        assert record["completed"] is True

    def test_many_concurrent_updates_and_completes(self, lifecycle, store, alice):
        ref = lifecycle.create(alice, "Buy milk", "2%")
        descriptions = [f"variant {i}" for i in range(8)]
        threads = [
            threading.Thread(target=lifecycle.update, args=(alice, "Buy milk", d)) for d in descriptions
        ]
        threads.insert(4, threading.Thread(target=lifecycle.complete, args=(alice, "Buy milk")))
        for t in threads:
            t.start()
        for t in threads:
            t.join(30)

        record = store.read(ref.address)
        assert record["completed"] is True
        assert record["description"] in descriptions
        assert record["created_at"] == ref.record["created_at"]


def test_full_scenario(lifecycle, store, alice):
    ref = lifecycle.create(alice, "Buy milk", "2%")
    lifecycle.update(alice, "Buy milk", "whole")
    lifecycle.complete(alice, "Buy milk")
    lifecycle.delete(alice, "Buy milk")
    assert store.exists(ref.address) is False
    with pytest.raises(NotFound):
        lifecycle.get(alice, "Buy milk")


def test_get_and_read(lifecycle, alice):
    ref = lifecycle.create(alice, "Buy milk", "2%")
    assert lifecycle.get(alice, "Buy milk") == ref
    assert lifecycle.read(ref.address) == ref.record
