# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import threading
import unittest
from pathlib import Path

from medvault.app_db import db_conn
from medvault.records.errors import IdExhaustedError, StoreInvariantViolation
from medvault.records.ids import IdGenerator, format_id
from medvault.records.models import HealthRecord
from medvault.records.storage import RecordStore


def _record(record_id: str, title: str = "Blood test") -> HealthRecord:
    return HealthRecord(
        id=record_id,
        title=title,
        record_type="lab",
        date=1_700_000_000,
        encrypted_url="enc://abc",
        file_size=1024,
        created_at=1_700_000_000,
    )


class TestRecordStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="medvault-store-"))
        self.db_path = self._tmp / "medvault.db"
        self.store = RecordStore(self.db_path)
        self.store.init()

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_list_is_owner_scoped_and_in_insertion_order(self) -> None:
        a1 = self.store.add("alice", lambda rid: _record(rid, "first"))
        self.store.add("bob", lambda rid: _record(rid, "bob's"))
        a2 = self.store.add("alice", lambda rid: _record(rid, "second"))

        self.assertEqual(self.store.list("alice"), [a1, a2])
        self.assertEqual([r.title for r in self.store.list("bob")], ["bob's"])
        self.assertEqual(self.store.list("carol"), [])

    def test_get_hides_records_of_other_owners(self) -> None:
        rec = self.store.add("alice", _record)
        self.assertEqual(self.store.get("alice", rec.id), rec)
        self.assertIsNone(self.store.get("bob", rec.id))
        self.assertIsNone(self.store.get("alice", "rec_missing"))

    def test_delete_requires_ownership(self) -> None:
        rec = self.store.add("alice", _record)

        self.assertFalse(self.store.delete("bob", rec.id))
        self.assertEqual(self.store.count("alice"), 1)

        self.assertTrue(self.store.delete("alice", rec.id))
        self.assertFalse(self.store.delete("alice", rec.id))
        self.assertEqual(self.store.count("alice"), 0)

    def test_insert_rejects_duplicate_id_across_owners(self) -> None:
        self.store.insert("alice", _record("rec_fixed"))
        with self.assertRaises(StoreInvariantViolation):
            self.store.insert("bob", _record("rec_fixed", "other"))
        self.assertEqual(self.store.count("bob"), 0)
        self.assertEqual(self.store.get("alice", "rec_fixed").title, "Blood test")

    def test_ids_not_reused_after_delete(self) -> None:
        first = self.store.add("alice", _record)
        self.store.delete("alice", first.id)
        second = self.store.add("alice", _record)
        self.assertNotEqual(first.id, second.id)
        self.assertGreater(second.id, first.id)

    def test_counter_survives_reopen(self) -> None:
        first = self.store.add("alice", _record)
        reopened = RecordStore(self.db_path)
        reopened.init()
        second = reopened.add("alice", _record)
        self.assertEqual(first.id, format_id(1))
        self.assertEqual(second.id, format_id(2))
        self.assertEqual(reopened.list("alice"), [first, second])

    def test_exhausted_counter_leaves_store_unchanged(self) -> None:
        store = RecordStore(self.db_path, ids=IdGenerator(max_value=1))
        store.add("alice", _record)
        with self.assertRaises(IdExhaustedError):
            store.add("alice", _record)
        self.assertEqual(store.count("alice"), 1)
        with db_conn(self.db_path) as conn:
            self.assertEqual(store.ids.peek(conn), 1)

    def test_builder_must_keep_allocated_id(self) -> None:
        with self.assertRaises(StoreInvariantViolation):
            self.store.add("alice", lambda rid: _record("rec_forged"))
        self.assertEqual(self.store.count("alice"), 0)
        # The failed transaction must not consume a counter value either.
        rec = self.store.add("alice", _record)
        self.assertEqual(rec.id, format_id(1))

    def test_concurrent_adds_get_distinct_ids(self) -> None:
        owners = ["alice", "bob", "carol", "dave"]
        per_owner = 15
        errors: list[BaseException] = []

        def worker(owner: str) -> None:
            try:
                for _ in range(per_owner):
                    self.store.add(owner, _record)
            except BaseException as exc:  # surfaced via the assertion below
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(o,)) for o in owners]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        all_ids = [r.id for o in owners for r in self.store.list(o)]
        self.assertEqual(len(all_ids), len(owners) * per_owner)
        self.assertEqual(len(set(all_ids)), len(all_ids))
        for owner in owners:
            self.assertEqual(self.store.count(owner), per_owner)

    def test_inserted_counter_shaped_id_is_skipped_by_allocator(self) -> None:
        self.store.insert("bob", _record(format_id(1)))
        added = [self.store.add("alice", _record) for _ in range(3)]
        self.assertEqual([r.id for r in added], [format_id(2), format_id(3), format_id(4)])
        self.assertEqual(self.store.count("alice"), 3)

    def test_inserted_id_stays_retired_after_delete(self) -> None:
        self.store.insert("bob", _record(format_id(5)))
        self.assertTrue(self.store.delete("bob", format_id(5)))
        self.assertEqual(self.store.add("alice", _record).id, format_id(6))

    def test_insert_of_foreign_shaped_ids_leaves_counter_alone(self) -> None:
        self.store.insert("bob", _record("rec_fixed"))
        self.store.insert("bob", _record("rec_ffffffffffffffff"))
        self.assertEqual(self.store.add("alice", _record).id, format_id(1))

    def test_readers_see_whole_snapshots_during_writes(self) -> None:
        for _ in range(5):
            self.store.add("alice", _record)

        stop = threading.Event()
        failures: list[str] = []
        errors: list[BaseException] = []

        def writer() -> None:
            try:
                for _ in range(40):
                    rec = self.store.add("alice", _record)
                    self.store.delete("alice", rec.id)
            except BaseException as exc:
                errors.append(exc)
            finally:
                stop.set()

        def reader() -> None:
            try:
                while not stop.is_set():
                    count, records = self.store.snapshot("alice")
                    if count != len(records):
                        failures.append(f"count {count} != listed {len(records)}")
                    if not 5 <= count <= 6:
                        failures.append(f"count {count} outside 5..6")
                    for rec in self.store.list("alice") + records:
                        if not (rec.id and rec.title and rec.record_type and rec.encrypted_url):
                            failures.append(f"partial record {rec!r}")
            except BaseException as exc:
                errors.append(exc)

        threads = [threading.Thread(target=reader) for _ in range(3)]
        threads.append(threading.Thread(target=writer))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        self.assertEqual(failures, [])
        self.assertEqual(self.store.count("alice"), 5)
        self.assertEqual(self.store.snapshot("alice"), (5, self.store.list("alice")))


class TestIdGenerator(unittest.TestCase):
    def test_format_id_is_fixed_width_hex(self) -> None:
        self.assertEqual(format_id(1), "rec_0000000000000001")
        self.assertEqual(format_id(255), "rec_00000000000000ff")
        self.assertLess(format_id(9), format_id(10))

    def test_next_id_requires_write_transaction(self) -> None:
        tmp = Path(tempfile.mkdtemp(prefix="medvault-ids-"))
        try:
            store = RecordStore(tmp / "ids.db")
            store.init()
            with db_conn(store.db_path) as conn:
                with self.assertRaises(StoreInvariantViolation):
                    IdGenerator().next_id(conn)
                self.assertEqual(IdGenerator().peek(conn), 0)
        finally:
            shutil.rmtree(tmp, ignore_errors=True)


if __name__ == "__main__":
    unittest.main()
