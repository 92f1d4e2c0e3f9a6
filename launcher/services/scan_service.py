"""
ScanService — background discovery with stale-result protection.

Each ``refresh()`` takes a new generation number before it starts scanning.
When the scan finishes, the result is handed back only if no newer refresh
was requested in the meantime; an older, slower scan is discarded and never
overwrites the snapshot cache or the candidate set.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence

from launcher.cache.history_store import HistoryStore
from launcher.cache.snapshot_cache import SnapshotCache
from launcher.schemas.app_schema import ApplicationRecord
from launcher.searcher.app_scanner import AppScanner
from launcher.utils.async_utils import run_in_executor
from launcher.utils.perf_log import PerfLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanCompletion:
    generation: int
    records: List[ApplicationRecord]
    from_snapshot: bool = False


class ScanService:
    def __init__(
        self,
        scanner: AppScanner,
        history: HistoryStore,
        roots: Sequence[str],
        snapshot: Optional[SnapshotCache] = None,
    ):
        self.scanner = scanner
        self.history = history
        self.roots = list(roots)
        self.snapshot = snapshot
        self._generation = 0
        self._gen_lock = threading.Lock()

    # ============ GENERATIONS ============

    @property
    def latest_generation(self) -> int:
        return self._generation

    def _next_generation(self) -> int:
        with self._gen_lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    # ============ SNAPSHOT ============

    def load_snapshot(self) -> Optional[ScanCompletion]:
        """Cached candidates for first paint, tagged generation 0."""
        if self.snapshot is None:
            return None
        records = self.snapshot.load()
        PerfLog.mark("Loaded snapshot (%d apps)" % len(records))
        if not records:
            return None
        return ScanCompletion(generation=0, records=records, from_snapshot=True)

    # ============ SCAN ============

    def scan_now(self) -> List[ApplicationRecord]:
        """Blocking scan with the current history; does not touch generations."""
        history = self.history.get()
        PerfLog.mark("Loaded history (%d entries)" % len(history))
        return self.scanner.scan(self.roots, history)

    async def refresh(self) -> Optional[ScanCompletion]:
        """
        Scan off the event loop. Returns None when a newer refresh superseded
        this one by the time it finished.
        """
        generation = self._next_generation()
        logger.info("Scan #%d started", generation)

        records = await run_in_executor(self.scan_now)

        if not self.is_current(generation):
            logger.info("Scan #%d discarded (latest is #%d)", generation, self._generation)
            return None

        if self.snapshot is not None:
            await run_in_executor(self.snapshot.save, records)

        logger.info("Scan #%d complete: %d apps", generation, len(records))
        return ScanCompletion(generation=generation, records=records)
