import os
import platform
from pathlib import Path
from typing import Optional


class PathManager:
    """
    Centralized path manager for the launcher.
    Resolves the user data directory and the files stored under it
    (history database, snapshot cache, perf log) depending on OS.
    Always uses Local paths (not Roaming).
    """

    def __init__(self, data_dir: Optional[str] = None, env: Optional[dict] = None):
        """
        data_dir: explicit override (usually ``settings.data_dir``)
        env: dictionary of environment variables, defaults to os.environ
        """
        self.env = env if env is not None else os.environ
        self.system = platform.system()
        self._override = data_dir
        self._setup_paths()

    def _default_user_data_dir(self) -> Path:
        """Determine OS-specific writable user data directory (Local)."""
        if self.system == "Windows":
            return Path.home() / "AppData" / "Local" / "SparkLauncher"
        elif self.system == "Darwin":
            return Path.home() / "Library" / "Application Support" / "SparkLauncher"
        else:
            # Linux / Unix
            base = self.env.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
            return Path(base) / "SparkLauncher"

    def _setup_paths(self):
        # Directories are created lazily by the stores that write into them
        self.USER_DATA_DIR = Path(
            self._override
            or self.env.get("LAUNCHER_DATA_DIR")
            or self._default_user_data_dir()
        ).expanduser()

        self.DB_DIR = self.USER_DATA_DIR / "db"
        self.CACHE_DIR = self.USER_DATA_DIR / "cache"
        self.LOGS_DIR = self.USER_DATA_DIR / "logs"

        self.HISTORY_DB = self.DB_DIR / "kvstore.db"
        self.SNAPSHOT_FILE = self.CACHE_DIR / "app_snapshot.json"
        self.PERF_LOG_FILE = self.LOGS_DIR / "launcher-perf.log"

    # Accessors
    def get_user_data_dir(self) -> Path:
        return self.USER_DATA_DIR

    def get_history_db(self) -> Path:
        return self.HISTORY_DB

    def get_snapshot_file(self) -> Path:
        return self.SNAPSHOT_FILE

    def get_logs_dir(self) -> Path:
        return self.LOGS_DIR

    def get_perf_log_file(self) -> Path:
        return self.PERF_LOG_FILE
