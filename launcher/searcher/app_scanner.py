"""
AppScanner — application bundle discovery over a fixed list of roots.

Usage:
    scanner = AppScanner(extension=".app")
    records = scanner.scan(["/Applications", "~/Applications"], history={})

SCAN ORDER
    1. Every configured root, listed one level deep (not recursive).
       Roots are listed in parallel but merged in configured order.
    2. Registered applications (Spotlight on macOS), when enabled.

DEDUP
    Identity is the canonical path (symlinks resolved). The first source that
    yields a path wins; later roots and the registered lookup never override it.

FAILURES
    Scanning is best-effort. A missing/unreadable root, an entry that vanishes
    or is a broken symlink, unreadable metadata, or a root that exceeds its
    time budget only shrinks the result. ``scan`` never raises.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeout
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from launcher.schemas.app_schema import ApplicationRecord
from launcher.searcher.bundle_metadata import BundleMetadataReader, MetadataReader, resolve_display_name
from launcher.searcher.registered_apps import RegisteredAppsSource
from launcher.utils.perf_log import PerfLog

logger = logging.getLogger(__name__)

# (canonical path, display name)
_Entry = Tuple[str, str]


def canonical_path(path: str) -> str:
    """Absolute path with symlinks and ``..`` resolved."""
    return os.path.realpath(os.path.abspath(os.path.expanduser(path)))


class AppScanner:
    def __init__(
        self,
        extension: str = ".app",
        metadata_reader: Optional[MetadataReader] = None,
        registered_lookup: Optional[RegisteredAppsSource] = None,
        include_hidden: bool = False,
        root_timeout: Optional[float] = 10.0,
    ):
        self.extension = extension
        self.metadata_reader = metadata_reader or BundleMetadataReader()
        self.registered_lookup = registered_lookup
        self.include_hidden = include_hidden
        self.root_timeout = root_timeout

    # ─────────────────────────────────────────────────────────────────────────
    #  Public API
    # ─────────────────────────────────────────────────────────────────────────
    def scan(self, roots: Sequence[str], history: Mapping[str, float]) -> List[ApplicationRecord]:
        started = time.perf_counter()
        roots = list(roots)

        sources: List[Tuple[str, Future]] = []
        seen: Dict[str, ApplicationRecord] = {}
        for root in roots:
            sources.append((root, self._start(root, self._scan_root, root)))
        if self.registered_lookup is not None:
            sources.append(("<registered>", self._start("registered", self._scan_registered)))

        deadline = None if self.root_timeout is None else time.monotonic() + self.root_timeout
        for label, future in sources:
            entries = self._collect(label, future, deadline)
            for path, name in entries:
                if path in seen:
                    continue
                seen[path] = ApplicationRecord.from_path(
                    path, name, last_launched=self._last_launched(history, path),
                )

        records = list(seen.values())
        PerfLog.mark("Total apps loaded: %d (%.2fms)" % (len(records), (time.perf_counter() - started) * 1000))
        logger.info("[AppScanner] scan complete: %d apps from %d roots", len(records), len(roots))
        return records

    # ─────────────────────────────────────────────────────────────────────────
    #  Sources
    # ─────────────────────────────────────────────────────────────────────────
    def _scan_root(self, root: str) -> List[_Entry]:
        started = time.perf_counter()
        try:
            with os.scandir(os.path.expanduser(root)) as it:
                names = sorted(entry.name for entry in it)
        except OSError as e:
            # Missing optional roots (e.g. ~/Applications) are expected
            logger.debug("[AppScanner] skip root %s: %s", root, e)
            return []

        entries = self._resolve_entries(os.path.join(root, name) for name in names)
        PerfLog.mark("Scanned %s (%d apps, %.2fms)" % (root, len(entries), (time.perf_counter() - started) * 1000))
        return entries

    def _scan_registered(self) -> List[_Entry]:
        try:
            paths = self.registered_lookup.lookup()
        except Exception as e:
            logger.debug("[AppScanner] registered lookup failed: %s", e)
            return []
        return self._resolve_entries(paths)

    # ─────────────────────────────────────────────────────────────────────────
    #  Helpers
    # ─────────────────────────────────────────────────────────────────────────
    @staticmethod
    def _start(label: str, fn, *args) -> Future:
        """
        Run ``fn`` on its own daemon thread. A root that hangs (e.g. a stalled
        network mount) is abandoned by ``scan`` and never holds up interpreter
        exit, which a ThreadPoolExecutor worker would.
        """
        future: Future = Future()

        def worker():
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = fn(*args)
            except BaseException as e:
                future.set_exception(e)
            else:
                future.set_result(result)

        threading.Thread(target=worker, name=f"app_scanner-{label}", daemon=True).start()
        return future

    def _collect(self, label: str, future: Future, deadline: Optional[float]) -> List[_Entry]:
        timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
        try:
            return future.result(timeout=timeout)
        except FutureTimeout:
            logger.warning("[AppScanner] %s timed out after %.1fs, skipped", label, self.root_timeout)
        except Exception as e:
            logger.debug("[AppScanner] %s failed: %s", label, e)
        return []

    def _resolve_entries(self, paths: Iterable[str]) -> List[_Entry]:
        entries: List[_Entry] = []
        for raw in paths:
            name = os.path.basename(raw.rstrip(os.sep))
            if not self._is_bundle_name(name):
                continue
            try:
                path = canonical_path(raw)
                if not os.path.exists(path):
                    # broken symlink or vanished since listing
                    continue
                names = self.metadata_reader.read_names(path)
                entries.append((path, resolve_display_name(names, name, self.extension)))
            except Exception as e:
                logger.debug("[AppScanner] skip entry %s: %s", raw, e)
        return entries

    def _is_bundle_name(self, name: str) -> bool:
        if not name or (name.startswith(".") and not self.include_hidden):
            return False
        lowered = name.lower()
        ext = self.extension.lower()
        return lowered.endswith(ext) and len(lowered) > len(ext)

    @staticmethod
    def _last_launched(history: Mapping[str, float], path: str) -> float:
        try:
            stamp = float(history.get(path, 0.0))
        except (TypeError, ValueError):
            return 0.0
        return stamp if stamp > 0 else 0.0
