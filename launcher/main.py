"""
Launcher command-line entry point
=================================
Scans the configured roots, ranks the result for the given query and prints
it, or launches a result with ``--launch``.

    spark-launcher saf            # list matches for "saf"
    spark-launcher saf --launch   # open the top match
    spark-launcher --json         # browse order, as JSON
"""
import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from launcher.cache.history_store import HistoryStore
from launcher.cache.snapshot_cache import SnapshotCache
from launcher.config import Settings, settings as default_settings
from launcher.schemas.app_schema import ApplicationRecord
from launcher.searcher.app_scanner import AppScanner
from launcher.searcher.registered_apps import RegisteredAppsLookup
from launcher.services.launch_service import LaunchCoordinator, Opener, Terminator, request_exit, shell_open
from launcher.services.scan_service import ScanService
from launcher.services.session import LauncherSession
from launcher.utils.async_utils import cleanup_executor
from launcher.utils.path_manager import PathManager
from launcher.utils.perf_log import PerfLog

logger = logging.getLogger(__name__)


@dataclass
class Components:
    history: HistoryStore
    session: LauncherSession

    def close(self) -> None:
        self.history.close()


def build_components(
    cfg: Settings,
    opener: Opener = shell_open,
    terminator: Terminator = request_exit,
    use_snapshot: Optional[bool] = None,
) -> Components:
    """Wire stores, scanner and services from settings."""
    paths = PathManager(cfg.data_dir)

    if cfg.perf_log_enabled:
        PerfLog.configure(paths.get_perf_log_file())

    history = HistoryStore(paths.get_history_db(), cfg.history_key)

    if use_snapshot is None:
        use_snapshot = cfg.snapshot_cache_enabled
    snapshot = SnapshotCache(paths.get_snapshot_file()) if use_snapshot else None

    registered = (
        RegisteredAppsLookup(timeout=cfg.registered_lookup_timeout)
        if cfg.registered_lookup_enabled else None
    )
    scanner = AppScanner(
        extension=cfg.bundle_extension,
        registered_lookup=registered,
        include_hidden=cfg.include_hidden,
        root_timeout=cfg.root_scan_timeout,
    )

    scans = ScanService(scanner, history, cfg.resolved_scan_roots(), snapshot)
    coordinator = LaunchCoordinator(history, opener=opener, terminator=terminator)
    return Components(history=history, session=LauncherSession(scans, coordinator))


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="spark-launcher", description="Find and open applications.")
    parser.add_argument("query", nargs="*", help="text to match against application names")
    parser.add_argument("--launch", action="store_true", help="open the selected result")
    parser.add_argument("--index", type=int, default=0, help="result row to select (default: 0)")
    parser.add_argument("--limit", type=int, default=20, help="rows to print (0 = all)")
    parser.add_argument("--json", action="store_true", help="print results as JSON")
    parser.add_argument("--no-cache", action="store_true", help="skip the snapshot cache")
    parser.add_argument("--log-level", default=None, help="override LAUNCHER_LOG_LEVEL")
    return parser.parse_args(argv)


def _printable(text: str) -> str:
    # undecodable file names arrive as surrogate escapes; show them as U+FFFD
    try:
        return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    except UnicodeEncodeError:
        return text.encode("utf-8", "replace").decode("utf-8")


def _print_results(records: List[ApplicationRecord], selection: int, as_json: bool) -> None:
    if as_json:
        print(_printable(json.dumps([r.model_dump() for r in records], indent=2, ensure_ascii=False)))
        return
    if not records:
        print("No applications found.")
        return
    for i, record in enumerate(records):
        marker = ">" if i == selection else " "
        print(_printable(f"{marker} {record.display_name:<40} {record.path}"))


async def _run(args: argparse.Namespace, components: Components) -> int:
    session = components.session

    if args.no_cache:
        await session.refresh()
    else:
        await session.activate()

    results = session.set_query(" ".join(args.query))
    session.move_selection(args.index)

    shown = results[: args.limit] if args.limit > 0 else results
    _print_results(shown, session.selection, args.json)

    if args.launch:
        return 0 if session.submit() is not None else 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or default_settings.log_level).upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )
    PerfLog.mark("Launcher starting")

    components = build_components(default_settings, use_snapshot=False if args.no_cache else None)
    try:
        return asyncio.run(_run(args, components))
    finally:
        components.close()
        cleanup_executor()


if __name__ == "__main__":
    sys.exit(main())
