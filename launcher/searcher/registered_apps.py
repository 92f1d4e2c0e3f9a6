"""
RegisteredAppsLookup — applications the OS knows about beyond directory listing.

On macOS this asks Spotlight for every application bundle
(``kMDItemContentTypeTree=com.apple.application-bundle``), optionally limited
to one directory tree. Anywhere else, or on any failure, it returns ``[]``:
this source is optional and an empty answer is normal.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)

SPOTLIGHT_QUERY = "kMDItemContentTypeTree=com.apple.application-bundle"


class RegisteredAppsSource(Protocol):
    def lookup(self, root_hint: Optional[str] = None) -> List[str]: ...


class RegisteredAppsLookup:
    def __init__(self, timeout: float = 8.0, platform: Optional[str] = None):
        self.timeout = timeout
        self._os = platform or sys.platform

    def lookup(self, root_hint: Optional[str] = None) -> List[str]:
        if self._os != "darwin":
            return []

        cmd = ["mdfind"]
        if root_hint:
            cmd += ["-onlyin", root_hint]
        cmd.append(SPOTLIGHT_QUERY)

        try:
            r = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("[RegisteredApps] mdfind failed: %s", e)
            return []

        if r.returncode != 0:
            logger.debug("[RegisteredApps] mdfind exit %d: %s", r.returncode, r.stderr.strip())
            return []

        paths = [line.strip() for line in r.stdout.splitlines()]
        return [p for p in paths if p and os.path.isabs(p)]
