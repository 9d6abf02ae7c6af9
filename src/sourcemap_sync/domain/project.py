"""Domain models for the local app project."""

from dataclasses import dataclass
from pathlib import Path

from sourcemap_sync.errors import FatalError


@dataclass(frozen=True)
class ProjectContext:
    """Project metadata read from the project and Cordova config files."""

    directory: Path
    package_id: str
    version: str
    pro_id: str | None = None
    name: str | None = None

    def require_pro_id(self) -> str:
        """Return the linked Pro app id or fail with a hint."""
        if not self.pro_id:
            raise FatalError(
                "Your project file does not have a pro_id. "
                "Run `ionic link` to link this app to Ionic Pro."
            )
        return self.pro_id
