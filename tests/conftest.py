"""Shared test fixtures."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from sourcemap_sync.adapters.build_runner import BuildRunner
from sourcemap_sync.adapters.monitoring_client import MonitoringClient
from sourcemap_sync.adapters.shell import Shell
from sourcemap_sync.config import Settings
from sourcemap_sync.domain.project import ProjectContext
from sourcemap_sync.domain.sourcemaps import PresignedPost, SourcemapRegistration
from sourcemap_sync.services.sourcemaps import SourcemapService

CONFIG_XML = """<?xml version='1.0' encoding='utf-8'?>
<widget id="io.ionic.starter" version="1.2.3" xmlns="http://www.w3.org/ns/widgets">
    <name>Starter</name>
</widget>
"""


@dataclass
class FakeShell(Shell):
    """Fake shell that returns a fixed commit hash."""

    stdout: str = "abc123def\n"
    calls: list[tuple[str, list[str], Path]] = field(default_factory=list)

    async def output(self, command: str, args: list[str], cwd: Path) -> str:
        self.calls.append((command, args, cwd))
        return self.stdout


@dataclass
class FakeBuildRunner(BuildRunner):
    """Fake build runner that can create the sourcemap directory."""

    creates: Path | None = None
    calls: list[tuple[Path, bool]] = field(default_factory=list)

    async def build(self, directory: Path, prod: bool = True) -> None:
        self.calls.append((directory, prod))
        if self.creates is not None:
            self.creates.mkdir(parents=True, exist_ok=True)
            (self.creates / "main.js.map").write_text("{}", encoding="utf-8")


@dataclass
class FakeMonitoringClient(MonitoringClient):
    """Fake monitoring client recording registrations and uploads."""

    failures: dict[str, Exception] = field(default_factory=dict)
    registrations: list[tuple[str, str, SourcemapRegistration]] = field(
        default_factory=list
    )
    uploads: list[tuple[PresignedPost, str, str]] = field(default_factory=list)

    async def register_sourcemap(
        self, pro_id: str, token: str, registration: SourcemapRegistration
    ) -> PresignedPost:
        self.registrations.append((pro_id, token, registration))
        failure = self.failures.get(registration.name)
        if failure is not None:
            raise failure
        return PresignedPost(
            url="https://uploads.test/bucket",
            fields={"key": f"maps/{registration.name}"},
        )

    async def upload_sourcemap(
        self, presigned: PresignedPost, name: str, content: str
    ) -> None:
        self.uploads.append((presigned, name, content))


def write_project(directory: Path, pro_id: str | None = "app-123") -> Path:
    """Write a minimal Ionic/Cordova project into ``directory``."""
    project_data: dict[str, object] = {"name": "starter", "type": "ionic-angular"}
    if pro_id is not None:
        project_data["pro_id"] = pro_id
    (directory / "ionic.config.json").write_text(
        json.dumps(project_data), encoding="utf-8"
    )
    (directory / "config.xml").write_text(CONFIG_XML, encoding="utf-8")
    return directory


def write_sourcemaps(directory: Path, names: list[str]) -> Path:
    """Create a sourcemap directory containing ``names``."""
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_text(f'{{"file": "{name}"}}', encoding="utf-8")
    return directory


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(token="test-token", config_directory=tmp_path / ".ionic")


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "app"
    directory.mkdir()
    write_project(directory)
    write_sourcemaps(
        directory / ".sourcemaps", ["app.js.map", "vendor.js.map", "readme.txt"]
    )
    return directory


@pytest.fixture
def project(project_dir: Path) -> ProjectContext:
    return ProjectContext(
        directory=project_dir,
        package_id="io.ionic.starter",
        version="1.2.3",
        pro_id="app-123",
        name="starter",
    )


@pytest.fixture
def monitoring_client() -> FakeMonitoringClient:
    return FakeMonitoringClient()


@pytest.fixture
def build_runner() -> FakeBuildRunner:
    return FakeBuildRunner()


@pytest.fixture
def sourcemap_service(
    monitoring_client: FakeMonitoringClient, build_runner: FakeBuildRunner
) -> SourcemapService:
    return SourcemapService(
        shell=FakeShell(),
        build_runner=build_runner,
        client=monitoring_client,
    )


@pytest.fixture(autouse=True)
def _reset_package_logger() -> None:
    logger = logging.getLogger("sourcemap_sync")
    logger.handlers.clear()
    logger.propagate = True
