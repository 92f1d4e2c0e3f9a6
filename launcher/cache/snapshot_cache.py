"""
Snapshot cache — last discovered application list, persisted as JSON.

Used only to paint results immediately on startup while a fresh scan runs.
Anything unreadable (missing file, bad JSON, unknown schema version, invalid
records) loads as an empty list.
"""

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Iterable, List, Union

from pydantic import ValidationError

from launcher.schemas.app_schema import SNAPSHOT_SCHEMA_VERSION, ApplicationRecord, SnapshotPayload

logger = logging.getLogger(__name__)


def _atomic_write(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".snapshot-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def _is_encodable(record: ApplicationRecord) -> bool:
    # names from os.scandir may carry surrogate escapes (non UTF-8 bytes)
    try:
        record.path.encode("utf-8")
        record.display_name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class SnapshotCache:
    def __init__(self, cache_file: Union[str, Path]):
        self.cache_file = Path(cache_file)

    def save(self, records: Iterable[ApplicationRecord]) -> bool:
        """Persist the projection of ``records``. Returns False if the write failed."""
        records = list(records)
        keep = [r for r in records if _is_encodable(r)]
        if len(keep) != len(records):
            logger.info("Leaving %d non UTF-8 applications out of the snapshot", len(records) - len(keep))

        payload = SnapshotPayload(saved_at=time.time(), records=keep)
        try:
            _atomic_write(self.cache_file, payload.model_dump_json(indent=2))
        except (OSError, ValueError) as e:
            logger.warning("Error saving app snapshot to %s: %s", self.cache_file, e)
            return False

        logger.info("Cached %d applications", len(payload.records))
        return True

    def load(self) -> List[ApplicationRecord]:
        try:
            raw = self.cache_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning("Error reading app snapshot: %s", e)
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Discarding corrupt app snapshot: %s", e)
            return []

        if not isinstance(data, dict) or data.get("version") != SNAPSHOT_SCHEMA_VERSION:
            logger.info("Discarding app snapshot with unknown schema")
            return []

        try:
            payload = SnapshotPayload.model_validate(data)
        except ValidationError as e:
            logger.warning("Discarding invalid app snapshot: %s", e.error_count())
            return []

        logger.info("Loaded %d applications from snapshot", len(payload.records))
        return payload.records

    def clear(self) -> None:
        try:
            self.cache_file.unlink()
        except FileNotFoundError:
            pass
