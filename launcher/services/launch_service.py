"""
Launch coordination: record usage, hand the path to the OS, then exit.

History is written before the open request and is never rolled back: it
records that the application was selected, not that it actually started.
A history write that fails is logged and the launch goes ahead.
"""

import logging
import os
import subprocess
import sys
import time
from typing import Callable

from launcher.cache.history_store import HistoryStore
from launcher.schemas.app_schema import ApplicationRecord

logger = logging.getLogger(__name__)

Opener = Callable[[str], object]
Terminator = Callable[[], object]


def shell_open(path: str) -> None:
    """Open path via the OS shell."""
    if sys.platform == "win32":
        os.startfile(path)
    elif sys.platform == "darwin":
        subprocess.Popen(["open", path])
    else:
        subprocess.Popen(["xdg-open", path])


def request_exit() -> None:
    sys.exit(0)


class LaunchCoordinator:
    def __init__(
        self,
        history: HistoryStore,
        opener: Opener = shell_open,
        terminator: Terminator = request_exit,
        clock: Callable[[], float] = time.time,
    ):
        self.history = history
        self.opener = opener
        self.terminator = terminator
        self.clock = clock

    def launch(self, record: ApplicationRecord) -> None:
        logger.info("Launching %s (%s)", record.display_name, record.path)

        try:
            self.history.record_launch(record.path, self.clock())
        except Exception as e:
            # A history failure must not block the launch itself
            logger.error("Failed to record launch of '%s': %s", record.path, e)

        try:
            self.opener(record.path)
        except Exception as e:
            # The opener owns its failures; history stays as recorded
            logger.error("Failed to open '%s': %s", record.path, e)

        self.terminator()
