"""
LauncherSession — state behind one launcher window.

Owns the query text, the candidate set and the keyboard selection. The
presentation layer reads ``results()`` / ``selected()`` after every change
and calls ``submit()`` on Enter and ``dismiss()`` on Escape.

The candidate set is only ever replaced as a whole (``apply_scan``), so a
reader sees either the previous list or the new one.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from launcher.schemas.app_schema import ApplicationRecord
from launcher.searcher.ranking import rank
from launcher.services.launch_service import LaunchCoordinator
from launcher.services.scan_service import ScanCompletion, ScanService

logger = logging.getLogger(__name__)


class LauncherSession:
    def __init__(self, scans: ScanService, launcher: LaunchCoordinator):
        self.scans = scans
        self.launcher = launcher
        self._candidates: Tuple[ApplicationRecord, ...] = ()
        self._applied_generation = -1
        self._query = ""
        self._selection = 0

    # ============ CANDIDATES ============

    @property
    def candidates(self) -> Tuple[ApplicationRecord, ...]:
        return self._candidates

    def apply_scan(self, completion: ScanCompletion) -> bool:
        """Swap in a finished scan unless a newer one is already showing."""
        if completion.generation < self._applied_generation:
            logger.debug("Ignoring scan #%d, #%d already applied",
                         completion.generation, self._applied_generation)
            return False

        self._candidates = tuple(completion.records)
        self._applied_generation = completion.generation
        self._clamp_selection()
        return True

    async def activate(self) -> bool:
        """Paint the snapshot (if any), then run a fresh scan."""
        cached = self.scans.load_snapshot()
        if cached is not None:
            self.apply_scan(cached)
        return await self.refresh()

    async def refresh(self) -> bool:
        completion = await self.scans.refresh()
        if completion is None:
            return False
        return self.apply_scan(completion)

    # ============ QUERY & SELECTION ============

    @property
    def query(self) -> str:
        return self._query

    def set_query(self, text: str) -> List[ApplicationRecord]:
        self._query = text or ""
        self._selection = 0
        return self.results()

    def results(self) -> List[ApplicationRecord]:
        return rank(self._candidates, self._query)

    @property
    def selection(self) -> int:
        return self._selection

    def move_selection(self, delta: int) -> Optional[ApplicationRecord]:
        self._selection += delta
        self._clamp_selection()
        return self.selected()

    def selected(self) -> Optional[ApplicationRecord]:
        results = self.results()
        if not results:
            return None
        return results[min(self._selection, len(results) - 1)]

    def _clamp_selection(self) -> None:
        count = len(self.results())
        self._selection = max(0, min(self._selection, count - 1)) if count else 0

    # ============ ACTIONS ============

    def submit(self) -> Optional[ApplicationRecord]:
        record = self.selected()
        if record is None:
            logger.info("Nothing to launch for query '%s'", self._query)
            return None
        self.launch(record)
        return record

    def launch(self, record: ApplicationRecord) -> None:
        self.launcher.launch(record)

    def dismiss(self) -> None:
        self.launcher.terminator()
