"""External build invoker."""

import asyncio
import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from sourcemap_sync.errors import FatalError

_logger = logging.getLogger(__name__)

PROD_FLAG = "--prod"


class BuildRunner(Protocol):
    """Interface for triggering a project build."""

    async def build(self, directory: Path, prod: bool = True) -> None:
        """Run the project build in ``directory``."""


@dataclass
class SubprocessBuildRunner(BuildRunner):
    """Runs a configured build command, streaming its output."""

    command: str

    def build_args(self, prod: bool) -> list[str]:
        """Split the configured command, adding the production flag if asked."""
        args = shlex.split(self.command)
        if prod and PROD_FLAG not in args:
            args.append(PROD_FLAG)
        return args

    async def build(self, directory: Path, prod: bool = True) -> None:
        """Run the build and fail if it exits non-zero."""
        args = self.build_args(prod)
        if not args:
            raise FatalError("No build command configured")
        _logger.info("Running build: %s", shlex.join(args))
        try:
            process = await asyncio.create_subprocess_exec(*args, cwd=directory)
        except FileNotFoundError as exc:
            raise FatalError(f"Build command not found: {args[0]}") from exc
        returncode = await process.wait()
        if returncode != 0:
            raise FatalError(f"Build failed with exit code {returncode}")
