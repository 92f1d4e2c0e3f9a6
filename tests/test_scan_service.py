import asyncio
import os
import tempfile
import threading
import unittest

from launcher.cache.history_store import HistoryStore
from launcher.cache.snapshot_cache import SnapshotCache
from launcher.schemas.app_schema import ApplicationRecord
from launcher.searcher.app_scanner import AppScanner, canonical_path
from launcher.services.scan_service import ScanService


class GatedScanner:
    """First scan blocks until released; later scans return immediately."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0
        self.old = [ApplicationRecord.from_path("/Old.app", "Old")]
        self.new = [ApplicationRecord.from_path("/New.app", "New")]

    def scan(self, roots, history):
        self.calls += 1
        if self.calls == 1:
            self.started.set()
            self.release.wait(5)
            return self.old
        return self.new


class TestScanService(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.history = HistoryStore(os.path.join(self._tmp.name, "kvstore.db"))
        self.snapshot = SnapshotCache(os.path.join(self._tmp.name, "app_snapshot.json"))

    def tearDown(self):
        self.history.close()
        self._tmp.cleanup()

    def test_refresh_scans_with_history_and_writes_snapshot(self):
        root = os.path.join(self._tmp.name, "Applications")
        bundle = os.path.join(root, "Safari.app")
        os.makedirs(bundle)
        self.history.record_launch(canonical_path(bundle), 55.0)
        service = ScanService(AppScanner(), self.history, [root], self.snapshot)

        completion = asyncio.run(service.refresh())

        self.assertIsNotNone(completion)
        self.assertEqual(completion.generation, 1)
        self.assertFalse(completion.from_snapshot)
        self.assertEqual([(r.display_name, r.last_launched) for r in completion.records], [("Safari", 55.0)])
        self.assertEqual(self.snapshot.load(), completion.records)

    def test_undecodable_bundle_name_does_not_break_refresh(self):
        root = os.path.join(self._tmp.name, "Applications")
        os.makedirs(os.path.join(root, "Safari.app"))
        try:
            os.mkdir(os.path.join(os.fsencode(root), b"Caf\xe9.app"))
        except (OSError, UnicodeError) as e:
            self.skipTest(f"file system rejects non UTF-8 names: {e}")
        service = ScanService(AppScanner(), self.history, [root], self.snapshot)

        completion = asyncio.run(service.refresh())

        self.assertIsNotNone(completion)
        self.assertEqual(len(completion.records), 2)
        self.assertEqual([r.display_name for r in self.snapshot.load()], ["Safari"])

    def test_history_round_trip_reaches_next_scan(self):
        root = os.path.join(self._tmp.name, "Applications")
        os.makedirs(os.path.join(root, "Notes.app"))
        service = ScanService(AppScanner(), self.history, [root])

        first = asyncio.run(service.refresh())
        self.assertEqual(first.records[0].last_launched, 0.0)

        self.history.record_launch(first.records[0].path, 1700000000.0)
        second = asyncio.run(service.refresh())

        self.assertEqual(second.generation, 2)
        self.assertEqual(second.records[0].last_launched, 1700000000.0)

    def test_stale_scan_is_discarded(self):
        scanner = GatedScanner()
        service = ScanService(scanner, self.history, ["/unused"], self.snapshot)

        async def scenario():
            loop = asyncio.get_running_loop()
            slow = asyncio.create_task(service.refresh())
            await loop.run_in_executor(None, scanner.started.wait, 5)
            fast = await service.refresh()
            scanner.release.set()
            return await slow, fast

        stale, current = asyncio.run(scenario())

        self.assertIsNone(stale)
        self.assertEqual(current.generation, 2)
        self.assertEqual(current.records, scanner.new)
        # the slow scan must not overwrite the newer snapshot
        self.assertEqual(self.snapshot.load(), scanner.new)

    def test_load_snapshot(self):
        service = ScanService(GatedScanner(), self.history, [], self.snapshot)
        self.assertIsNone(service.load_snapshot())

        records = [ApplicationRecord.from_path("/Cached.app", "Cached", 3.0)]
        self.snapshot.save(records)
        cached = service.load_snapshot()

        self.assertEqual(cached.generation, 0)
        self.assertTrue(cached.from_snapshot)
        self.assertEqual(cached.records, records)

    def test_no_snapshot_configured(self):
        service = ScanService(GatedScanner(), self.history, [], snapshot=None)

        self.assertIsNone(service.load_snapshot())

    def test_generation_counter(self):
        service = ScanService(GatedScanner(), self.history, [])
        self.assertEqual(service.latest_generation, 0)
        self.assertTrue(service.is_current(0))


if __name__ == "__main__":
    unittest.main()
