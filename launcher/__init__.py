"""
Spark Launcher

Application discovery, MRU ranking and usage history for a keyboard launcher.

Usage:
    from launcher import rank, AppScanner, HistoryStore

    history = HistoryStore("/tmp/kvstore.db")
    records = AppScanner().scan(["/Applications"], history.get())
    for record in rank(records, "saf"):
        print(record.display_name, record.path)
"""

from launcher.schemas.app_schema import ApplicationRecord
from launcher.cache.history_store import HistoryStore
from launcher.cache.snapshot_cache import SnapshotCache
from launcher.searcher.app_scanner import AppScanner
from launcher.searcher.ranking import rank
from launcher.services.launch_service import LaunchCoordinator
from launcher.services.scan_service import ScanCompletion, ScanService
from launcher.services.session import LauncherSession

__version__ = "0.1.0"

__all__ = [
    "ApplicationRecord",
    "HistoryStore",
    "SnapshotCache",
    "AppScanner",
    "rank",
    "LaunchCoordinator",
    "ScanCompletion",
    "ScanService",
    "LauncherSession",
]
