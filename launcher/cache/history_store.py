import json
import logging
import math
import sqlite3
import threading
from pathlib import Path
from typing import Dict, Union

from launcher.config import DEFAULT_HISTORY_KEY

logger = logging.getLogger(__name__)


class HistoryStore:
    """
    SQLite-backed usage history: ``path -> last launched (epoch seconds)``.

    The whole mapping lives as one JSON value in a ``kv_store`` row, so every
    write replaces it in a single transaction and a reader sees either the old
    or the new mapping, never a mix.

    - Single persistent connection, opened in ``__init__`` and closed by ``close()``
    - WAL journal mode
    - One lock serializes every read and read-modify-write
    """

    def __init__(self, db_path: Union[str, Path], key: str = DEFAULT_HISTORY_KEY):
        self.db_path = Path(db_path)
        self.key = key
        self._lock = threading.Lock()

        if str(self.db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,  # safe: access is serialized by self._lock
            timeout=10,
        )
        self._init_db()

        logger.info("History store initialized at %s", self.db_path)

    def _init_db(self):
        cursor = self._conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at REAL
            )
        """)
        self._conn.commit()

    # ============ READ ============

    def _read_locked(self, strict: bool = False) -> Dict[str, float]:
        """
        With ``strict`` a database error propagates instead of reading as
        empty, so a write never rebuilds the mapping from a failed read.
        """
        if self._conn is None:
            return {}
        try:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (self.key,)
            ).fetchone()
        except sqlite3.Error as e:
            if strict:
                raise
            logger.warning("History read failed: %s", e)
            return {}

        if not row:
            return {}

        try:
            raw = json.loads(row[0])
        except (TypeError, ValueError) as e:
            logger.warning("Discarding corrupt history value: %s", e)
            return {}

        if not isinstance(raw, dict):
            logger.warning("Discarding history value of type %s", type(raw).__name__)
            return {}

        history: Dict[str, float] = {}
        for path, stamp in raw.items():
            if isinstance(stamp, bool) or not isinstance(stamp, (int, float)):
                continue
            stamp = float(stamp)
            if math.isfinite(stamp) and stamp >= 0:
                history[str(path)] = stamp
        return history

    def get(self) -> Dict[str, float]:
        """Current mapping; empty when nothing has been recorded yet."""
        with self._lock:
            return self._read_locked()

    # ============ WRITE ============

    def record_launch(self, path: str, timestamp: float) -> Dict[str, float]:
        """
        Set ``mapping[path] = timestamp`` and persist the whole mapping.

        Out-of-order timestamps simply overwrite. Returns the mapping as written.
        A database error while reading the current mapping aborts the write.
        """
        timestamp = float(timestamp)
        if not math.isfinite(timestamp) or timestamp < 0:
            raise ValueError(f"timestamp must be a non-negative number, got {timestamp!r}")

        with self._lock:
            if self._conn is None:
                raise sqlite3.ProgrammingError("history store is closed")
            history = self._read_locked(strict=True)
            history[path] = timestamp
            with self._conn:
                self._conn.execute(
                    "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                    (self.key, json.dumps(history), timestamp),
                )
            logger.debug("Recorded launch %s @ %.3f (%d entries)", path, timestamp, len(history))
            return history

    def clear(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            with self._conn:
                self._conn.execute("DELETE FROM kv_store WHERE key = ?", (self.key,))
        logger.info("History cleared")

    # ============ LIFECYCLE ============

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "HistoryStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def __repr__(self) -> str:
        return f"HistoryStore({str(self.db_path)!r}, key={self.key!r})"

