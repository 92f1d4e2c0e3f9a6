"""
Ranking — filter and order candidates for a typed query.

Pure functions; cheap enough to call on every keystroke.

Empty query (browse order):
    last_launched descending, then display name ascending (case-folded).

Non-empty query:
    keep names containing the query (case-insensitive substring), then
    prefix matches first, then last_launched descending, then display name.
"""

from typing import Iterable, List, Tuple

from launcher.schemas.app_schema import ApplicationRecord


def normalize_query(query: str) -> str:
    return (query or "").strip().casefold()


def base_order_key(record: ApplicationRecord) -> Tuple[float, str, str]:
    # path closes ties between identical names so output is fully deterministic
    return (-record.last_launched, record.display_name.casefold(), record.path)


def _match_key(record: ApplicationRecord, query: str) -> Tuple[bool, float, str, str]:
    is_prefix = record.display_name.casefold().startswith(query)
    return (not is_prefix,) + base_order_key(record)


def rank(candidates: Iterable[ApplicationRecord], query: str = "") -> List[ApplicationRecord]:
    q = normalize_query(query)
    if not q:
        return sorted(candidates, key=base_order_key)

    matches = [r for r in candidates if q in r.display_name.casefold()]
    return sorted(matches, key=lambda r: _match_key(r, q))
