"""
searcher — application discovery and ranking.

    from launcher.searcher import AppScanner, rank

    records = AppScanner().scan(["/Applications"], history={})
    rank(records, "term")
"""

from .app_scanner      import AppScanner, canonical_path
from .bundle_metadata  import BundleMetadataReader, resolve_display_name
from .registered_apps  import RegisteredAppsLookup
from .ranking          import rank, normalize_query, base_order_key

__all__ = [
    "AppScanner",
    "canonical_path",
    "BundleMetadataReader",
    "resolve_display_name",
    "RegisteredAppsLookup",
    "rank",
    "normalize_query",
    "base_order_key",
]
