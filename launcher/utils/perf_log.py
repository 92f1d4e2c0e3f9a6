"""
PerfLog — elapsed-time markers for startup and scan phases.

Every mark is logged at DEBUG as ``[12.34ms] label`` relative to the moment
this module was imported. When a log file is configured the same line is
appended to it as well, so timings survive a launcher that exits right after
opening an application.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class PerfLog:
    _start = time.perf_counter()
    _file: Optional[Path] = None
    _lock = threading.Lock()

    @classmethod
    def configure(cls, log_file: Optional[Path]) -> None:
        """Enable (path) or disable (None) file output."""
        cls._file = Path(log_file) if log_file else None

    @classmethod
    def elapsed_ms(cls) -> float:
        return (time.perf_counter() - cls._start) * 1000

    @classmethod
    def mark(cls, label: str) -> str:
        message = "[%.2fms] %s" % (cls.elapsed_ms(), label)
        logger.debug(message)

        if cls._file is not None:
            with cls._lock:
                try:
                    cls._file.parent.mkdir(parents=True, exist_ok=True)
                    with cls._file.open("a", encoding="utf-8") as handle:
                        handle.write(message + "\n")
                except OSError as e:
                    logger.debug("PerfLog write failed (%s): %s", cls._file, e)
        return message
