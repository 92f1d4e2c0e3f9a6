"""
BundleMetadataReader — names declared inside an application bundle.

Reads ``<bundle>/Contents/Info.plist`` (the layout macOS uses) and returns
``CFBundleDisplayName`` / ``CFBundleName``. A missing or unreadable plist
yields empty names; the scanner then falls back to the file name.
"""

from __future__ import annotations

import logging
import os
import plistlib
from typing import Any, Optional, Protocol

from launcher.schemas.app_schema import BundleNames

logger = logging.getLogger(__name__)

DISPLAY_NAME_KEY = "CFBundleDisplayName"
SHORT_NAME_KEY = "CFBundleName"


class MetadataReader(Protocol):
    def read_names(self, bundle_path: str) -> BundleNames: ...


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class BundleMetadataReader:
    """Default reader backed by :mod:`plistlib`."""

    def read_names(self, bundle_path: str) -> BundleNames:
        plist = os.path.join(bundle_path, "Contents", "Info.plist")
        try:
            with open(plist, "rb") as fh:
                info = plistlib.load(fh)
        except FileNotFoundError:
            return BundleNames()
        except (OSError, plistlib.InvalidFileException, ValueError) as e:
            logger.debug("[BundleMetadata] %s: %s", plist, e)
            return BundleNames()

        if not isinstance(info, dict):
            return BundleNames()

        return BundleNames(
            display_name=_clean(info.get(DISPLAY_NAME_KEY)),
            short_name=_clean(info.get(SHORT_NAME_KEY)),
        )


def resolve_display_name(names: BundleNames, entry_name: str, extension: str) -> str:
    """
    First non-empty of: declared display name, declared short name, file stem.
    """
    for candidate in (names.display_name, names.short_name):
        if candidate:
            return candidate
    if extension and entry_name.lower().endswith(extension.lower()):
        return entry_name[: -len(extension)]
    return os.path.splitext(entry_name)[0]
