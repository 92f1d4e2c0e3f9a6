import json
import os
import sqlite3
import tempfile
import threading
import unittest
from unittest.mock import MagicMock

from launcher.cache.history_store import HistoryStore


class TestHistoryStore(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self._tmp.name, "db", "kvstore.db")
        self.store = HistoryStore(self.db_path)

    def tearDown(self):
        self.store.close()
        self._tmp.cleanup()

    def _write_raw(self, value: str):
        conn = sqlite3.connect(self.db_path)
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, 0)",
                (self.store.key, value),
            )
        conn.close()

    def test_empty_store_returns_empty_mapping(self):
        self.assertEqual(self.store.get(), {})

    def test_record_then_get(self):
        self.store.record_launch("/Applications/Safari.app", 1700000000.25)

        self.assertEqual(self.store.get(), {"/Applications/Safari.app": 1700000000.25})

    def test_record_keeps_other_entries(self):
        self.store.record_launch("/Applications/A.app", 10)
        self.store.record_launch("/Applications/B.app", 20)

        self.assertEqual(self.store.get(), {"/Applications/A.app": 10.0, "/Applications/B.app": 20.0})

    def test_out_of_order_timestamp_overwrites(self):
        self.store.record_launch("/Applications/A.app", 500)
        self.store.record_launch("/Applications/A.app", 100)

        self.assertEqual(self.store.get()["/Applications/A.app"], 100.0)

    def test_negative_timestamp_rejected(self):
        with self.assertRaises(ValueError):
            self.store.record_launch("/Applications/A.app", -1)
        self.assertEqual(self.store.get(), {})

    def test_persists_across_reopen(self):
        self.store.record_launch("/Applications/Notes.app", 99.5)
        self.store.close()

        with HistoryStore(self.db_path) as reopened:
            self.assertEqual(reopened.get(), {"/Applications/Notes.app": 99.5})

    def test_corrupt_value_reads_as_empty(self):
        self._write_raw("{not json")

        self.assertEqual(self.store.get(), {})

        # and the next write starts over from an empty mapping
        self.store.record_launch("/Applications/A.app", 1)
        self.assertEqual(self.store.get(), {"/Applications/A.app": 1.0})

    def test_wrong_shape_reads_as_empty(self):
        self._write_raw(json.dumps(["/Applications/A.app", 1]))

        self.assertEqual(self.store.get(), {})

    def test_invalid_values_are_dropped(self):
        self._write_raw(json.dumps({"/a.app": 5, "/b.app": "yesterday", "/c.app": -3, "/d.app": True}))

        self.assertEqual(self.store.get(), {"/a.app": 5.0})

    def test_separate_keys_do_not_collide(self):
        other = HistoryStore(self.db_path, key="other.history")
        try:
            other.record_launch("/x.app", 1)
            self.assertEqual(self.store.get(), {})
            self.assertEqual(other.get(), {"/x.app": 1.0})
        finally:
            other.close()

    def test_concurrent_records_are_not_lost(self):
        paths = [f"/Applications/App{i}.app" for i in range(20)]
        barrier = threading.Barrier(len(paths))

        def worker(path, stamp):
            barrier.wait()
            self.store.record_launch(path, stamp)

        threads = [threading.Thread(target=worker, args=(p, float(i))) for i, p in enumerate(paths)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(self.store.get(), {p: float(i) for i, p in enumerate(paths)})

    def test_failed_read_aborts_write(self):
        self.store.record_launch("/Applications/Safari.app", 10)
        real_conn = self.store._conn
        failing = MagicMock()
        failing.execute.side_effect = sqlite3.OperationalError("database is locked")
        self.store._conn = failing
        try:
            self.assertEqual(self.store.get(), {})
            with self.assertRaises(sqlite3.OperationalError):
                self.store.record_launch("/Applications/Notes.app", 20)
        finally:
            self.store._conn = real_conn

        # the earlier entry survives; nothing was rebuilt from the failed read
        self.assertEqual(self.store.get(), {"/Applications/Safari.app": 10.0})
        failing.__enter__.assert_not_called()

    def test_clear(self):
        self.store.record_launch("/a.app", 1)
        self.store.clear()

        self.assertEqual(self.store.get(), {})

    def test_closed_store(self):
        self.store.close()

        self.assertFalse(self.store.is_open)
        self.assertEqual(self.store.get(), {})
        with self.assertRaises(sqlite3.ProgrammingError):
            self.store.record_launch("/a.app", 1)


if __name__ == "__main__":
    unittest.main()
