"""Dependency container wiring for the CLI."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sourcemap_sync.adapters.build_runner import SubprocessBuildRunner
from sourcemap_sync.adapters.monitoring_client import HttpxMonitoringClient
from sourcemap_sync.adapters.shell import AsyncioShell
from sourcemap_sync.config import Settings
from sourcemap_sync.services.sourcemaps import SourcemapService


@dataclass
class SyncContainer:
    """Holds the dependencies for one CLI invocation."""

    settings: Settings
    sourcemap_service: SourcemapService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> SyncContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    monitoring_client = HttpxMonitoringClient.create(resolved_settings)
    sourcemap_service = SourcemapService(
        shell=AsyncioShell(),
        build_runner=SubprocessBuildRunner(resolved_settings.build_command),
        client=monitoring_client,
        sourcemap_directory=resolved_settings.sourcemap_directory,
        max_concurrency=resolved_settings.max_concurrency,
    )

    async def close_resources() -> None:
        await monitoring_client.close()

    return SyncContainer(
        settings=resolved_settings,
        sourcemap_service=sourcemap_service,
        close_resources=close_resources,
    )
