"""Models for sourcemap registration and upload."""

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field

SOURCEMAP_SUFFIX = ".js.map"


@dataclass(frozen=True)
class SourcemapFile:
    """A sourcemap file found on disk."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name


class SourcemapRegistration(BaseModel):
    """Body of the sourcemap registration request."""

    name: str
    version: str
    commit: str
    snapshot_id: str | None = None

    def to_payload(self) -> dict[str, object]:
        """Serialize for the API, leaving out an unset snapshot id."""
        return self.model_dump(exclude_none=True)


class PresignedPost(BaseModel):
    """Presigned object storage form returned by the API."""

    url: str
    fields: dict[str, str] = Field(default_factory=dict)


class SourcemapRegistrationResponse(BaseModel):
    """Registration response data."""

    sourcemap_post: PresignedPost


@dataclass(frozen=True)
class SourcemapSyncResult:
    """Outcome of syncing a single sourcemap."""

    file: SourcemapFile
    ok: bool
    error: str | None = None
    status_code: int | None = None


@dataclass
class SyncReport:
    """Aggregate outcome of a sync run."""

    results: list[SourcemapSyncResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def synced(self) -> list[SourcemapSyncResult]:
        return [result for result in self.results if result.ok]

    @property
    def failed(self) -> list[SourcemapSyncResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failed
