"""Command-line interface for syncing sourcemaps to Pro Monitoring."""

import asyncio
from pathlib import Path

import click

from sourcemap_sync.app_logging import configure_logging
from sourcemap_sync.containers import SyncContainer, build_container
from sourcemap_sync.domain.project import ProjectContext
from sourcemap_sync.domain.sourcemaps import SyncReport
from sourcemap_sync.errors import FatalError
from sourcemap_sync.project import load_project

DOCS_URL = "https://ionicframework.com/docs/pro/monitoring"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Ionic Pro command-line tools."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("container_factory", build_container)


@cli.group()
def monitoring() -> None:
    """Error Monitoring commands."""


@monitoring.command()
@click.argument("snapshot_id", required=False)
@click.option("--build", is_flag=True, help="Invoke a production Ionic build")
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Project root directory",
)
@click.pass_context
def syncmaps(
    ctx: click.Context, snapshot_id: str | None, build: bool, project_dir: Path
) -> None:
    """Build & upload sourcemaps to Ionic Pro Monitoring service.

    By default, uploads the sourcemap files within .sourcemaps. To perform a
    production build before uploading sourcemaps, pass --build.
    """
    container: SyncContainer = ctx.obj["container_factory"]()
    try:
        project, report = asyncio.run(
            _sync(container, project_dir.resolve(), snapshot_id, build)
        )
    except FatalError as exc:
        raise click.ClickException(str(exc)) from exc

    details = format_columns(
        [
            ("Pro ID", click.style(project.require_pro_id(), bold=True)),
            ("Version", click.style(project.version, bold=True)),
            ("Package ID", click.style(project.package_id, bold=True)),
            (
                "Snapshot ID",
                click.style(snapshot_id, bold=True)
                if snapshot_id
                else click.style("not set", dim=True),
            ),
        ]
    )
    click.echo(
        f"{click.style('[OK]', fg='green')} Sourcemaps synced!\n"
        f"{details}\n\n"
        "See the Error Monitoring docs for usage information and next steps: "
        f"{click.style(DOCS_URL, bold=True)}"
    )


async def _sync(
    container: SyncContainer,
    project_dir: Path,
    snapshot_id: str | None,
    build: bool,
) -> tuple[ProjectContext, SyncReport]:
    """Run the sync pipeline and release HTTP resources afterwards."""
    try:
        project = load_project(project_dir)
        token = container.settings.resolve_token()
        if not token:
            raise FatalError(
                "You are not logged in. Run `ionic login` or set IONIC_TOKEN."
            )
        report = await container.sourcemap_service.run(
            project,
            token,
            snapshot_id=snapshot_id,
            build=build,
            on_progress=_echo_progress,
        )
    finally:
        await container.close_resources()

    status = "done" if report.ok else "failed"
    click.echo(
        f"Syncing sourcemaps: {click.style(f'{report.total} / {report.total}', bold=True)}"
        f" - {status}",
        err=True,
    )
    return project, report


def _echo_progress(done: int, total: int) -> None:
    click.echo(
        f"Syncing sourcemaps: {click.style(f'{done} / {total}', bold=True)}",
        err=True,
    )


def format_columns(rows: list[tuple[str, str]], vsep: str = ":") -> str:
    """Render label/value rows with labels padded to a common width."""
    if not rows:
        return ""
    width = max(len(label) for label, _ in rows)
    return "\n".join(f"{label.ljust(width)} {vsep} {value}" for label, value in rows)


def main() -> None:
    """Console script entrypoint."""
    cli(obj={})


if __name__ == "__main__":
    main()
