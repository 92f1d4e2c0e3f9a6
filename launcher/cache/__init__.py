from launcher.cache.history_store import HistoryStore
from launcher.cache.snapshot_cache import SnapshotCache

__all__ = ["HistoryStore", "SnapshotCache"]
