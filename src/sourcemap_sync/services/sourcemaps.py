"""Sourcemap discovery, build and upload orchestration."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from sourcemap_sync.adapters.build_runner import BuildRunner
from sourcemap_sync.adapters.monitoring_client import MonitoringClient
from sourcemap_sync.adapters.shell import Shell, get_commit_hash
from sourcemap_sync.domain.project import ProjectContext
from sourcemap_sync.domain.sourcemaps import (
    SOURCEMAP_SUFFIX,
    SourcemapFile,
    SourcemapRegistration,
    SourcemapSyncResult,
    SyncReport,
)
from sourcemap_sync.errors import FatalError, MonitoringAPIError

_logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class SourcemapService:
    """Finds local sourcemaps and syncs them to the monitoring service."""

    shell: Shell
    build_runner: BuildRunner
    client: MonitoringClient
    sourcemap_directory: str = ".sourcemaps"
    max_concurrency: int = 8

    async def run(  # noqa: PLR0913
        self,
        project: ProjectContext,
        token: str,
        snapshot_id: str | None = None,
        build: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> SyncReport:
        """Ensure sourcemaps exist, then upload every one of them."""
        pro_id = project.require_pro_id()
        commit = await get_commit_hash(self.shell, project.directory)
        _logger.debug("Commit hash: %s", commit)

        directory = await self.ensure_sourcemaps(project, build=build)
        files = await asyncio.to_thread(self.find_sourcemaps, directory)
        _logger.debug(
            "Found %s sourcemap files: %s",
            len(files),
            ", ".join(file.name for file in files),
        )
        return await self.sync_all(
            files,
            pro_id=pro_id,
            token=token,
            version=project.version,
            commit=commit,
            snapshot_id=snapshot_id,
            on_progress=on_progress,
        )

    async def ensure_sourcemaps(
        self, project: ProjectContext, build: bool = False
    ) -> Path:
        """Return the sourcemap directory, building first when needed."""
        directory = (project.directory / self.sourcemap_directory).resolve()
        if build or not directory.is_dir():
            await self.build_runner.build(project.directory, prod=True)

        if not directory.is_dir():
            raise FatalError(
                f"Cannot find directory: {directory}.\n"
                "Make sure you have the latest @ionic/app-scripts. "
                "Then, re-run this command."
            )
        _logger.info("Using existing sourcemaps in %s", directory)
        return directory

    def find_sourcemaps(self, directory: Path) -> list[SourcemapFile]:
        """List the ``.js.map`` files directly inside ``directory``."""
        return [
            SourcemapFile(path=entry)
            for entry in directory.iterdir()
            if entry.name.endswith(SOURCEMAP_SUFFIX) and entry.is_file()
        ]

    async def sync_all(  # noqa: PLR0913
        self,
        files: list[SourcemapFile],
        *,
        pro_id: str,
        token: str,
        version: str,
        commit: str,
        snapshot_id: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> SyncReport:
        """Sync files concurrently, reporting progress as each one settles.

        Pending uploads are cancelled if any file raises an unrecognized
        error; the error is then re-raised.
        """
        semaphore = asyncio.Semaphore(max(1, self.max_concurrency))

        async def sync_bounded(file: SourcemapFile) -> SourcemapSyncResult:
            async with semaphore:
                return await self.sync_sourcemap(
                    file,
                    pro_id=pro_id,
                    token=token,
                    version=version,
                    commit=commit,
                    snapshot_id=snapshot_id,
                )

        tasks = [asyncio.create_task(sync_bounded(file)) for file in files]
        report = SyncReport()
        try:
            for next_done in asyncio.as_completed(tasks):
                report.results.append(await next_done)
                if on_progress is not None:
                    on_progress(report.total, len(files))
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        return report

    async def sync_sourcemap(  # noqa: PLR0913
        self,
        file: SourcemapFile,
        *,
        pro_id: str,
        token: str,
        version: str,
        commit: str,
        snapshot_id: str | None = None,
    ) -> SourcemapSyncResult:
        """Register one sourcemap and upload it to the presigned endpoint."""
        registration = SourcemapRegistration(
            name=file.name,
            version=version,
            commit=commit,
            snapshot_id=snapshot_id,
        )
        try:
            presigned = await self.client.register_sourcemap(
                pro_id, token, registration
            )
        except MonitoringAPIError as exc:
            _logger.error("Unable to sync map %s: %s", file.path, exc.message)
            if exc.is_unauthorized:
                _logger.error("Try logging out and back in again.")
            return SourcemapSyncResult(
                file=file, ok=False, error=exc.message, status_code=exc.status_code
            )

        content = await asyncio.to_thread(
            file.path.read_text, encoding="utf-8", errors="replace"
        )
        await self.client.upload_sourcemap(presigned, file.name, content)
        return SourcemapSyncResult(file=file, ok=True)
