from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

SNAPSHOT_SCHEMA_VERSION = 1


class ApplicationRecord(BaseModel):
    """One launchable application bundle, identified by its canonical path."""

    model_config = ConfigDict(frozen=True)

    identity: str  # canonical path; never a surrogate id
    display_name: str
    path: str  # canonical absolute path
    last_launched: float = Field(default=0.0, ge=0.0)  # 0 = never launched

    @model_validator(mode="after")
    def _identity_is_path(self) -> "ApplicationRecord":
        if self.identity != self.path:
            raise ValueError("identity must equal the canonical path")
        return self

    @classmethod
    def from_path(cls, path: str, display_name: str, last_launched: float = 0.0) -> "ApplicationRecord":
        return cls(identity=path, display_name=display_name, path=path, last_launched=last_launched)


class BundleNames(BaseModel):
    """Names declared inside a bundle's metadata."""
    display_name: Optional[str] = None
    short_name: Optional[str] = None


class SnapshotPayload(BaseModel):
    """On-disk layout of the snapshot cache."""
    version: int = SNAPSHOT_SCHEMA_VERSION
    saved_at: float = 0.0
    records: List[ApplicationRecord] = Field(default_factory=list)
