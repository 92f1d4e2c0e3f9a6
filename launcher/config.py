"""
Launcher Configuration
======================
Centralized settings for the application launcher core.

Values are read from the environment (prefix ``LAUNCHER_``) and an optional
``.env`` file next to the working directory. List values such as
``LAUNCHER_SCAN_ROOTS`` are given as JSON, e.g.::

    LAUNCHER_SCAN_ROOTS='["/Applications", "~/Applications"]'
"""
from __future__ import annotations

import os
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULT_SCAN_ROOTS: List[str] = [
    "/Applications",
    "/System/Applications",
    "~/Applications",
]

DEFAULT_HISTORY_KEY = "launcher.usage.history"


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------

class Settings(BaseSettings):
    """Static launcher options."""

    model_config = SettingsConfigDict(
        env_prefix="LAUNCHER_",
        env_file=".env",
        extra="ignore",
    )

    # Discovery
    scan_roots: List[str] = list(DEFAULT_SCAN_ROOTS)
    bundle_extension: str = ".app"
    include_hidden: bool = False
    registered_lookup_enabled: bool = True
    registered_lookup_timeout: float = 8.0
    root_scan_timeout: Optional[float] = 10.0

    # Persistence
    snapshot_cache_enabled: bool = True
    data_dir: Optional[str] = None
    history_key: str = DEFAULT_HISTORY_KEY

    # Logging
    log_level: str = "INFO"
    perf_log_enabled: bool = False

    @field_validator("bundle_extension")
    @classmethod
    def _dotted_extension(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("bundle_extension must not be empty")
        return value if value.startswith(".") else f".{value}"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    def resolved_scan_roots(self) -> List[str]:
        """Scan roots with ``~`` and environment variables expanded, order kept."""
        return [os.path.expandvars(os.path.expanduser(root)) for root in self.scan_roots]


# Singleton settings instance
settings = Settings()
