"""Subprocess runner for external commands."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from sourcemap_sync.errors import FatalError

_logger = logging.getLogger(__name__)


class Shell(Protocol):
    """Interface for running external commands."""

    async def output(self, command: str, args: list[str], cwd: Path) -> str:
        """Run a command and return its stdout."""


@dataclass
class AsyncioShell(Shell):
    """Shell implemented with asyncio subprocesses."""

    async def output(self, command: str, args: list[str], cwd: Path) -> str:
        """Run a command in ``cwd`` and return decoded stdout."""
        command_line = " ".join([command, *args])
        _logger.debug("Running %s in %s", command_line, cwd)
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise FatalError(f"Command not found: {command}") from exc
        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise FatalError(
                f"`{command_line}` exited with code {process.returncode}: "
                f"{stderr.decode('utf-8', errors='replace').strip()}"
            )
        return stdout.decode("utf-8")


async def get_commit_hash(shell: Shell, directory: Path) -> str:
    """Return the current git commit hash for the project."""
    output = await shell.output("git", ["rev-parse", "HEAD"], cwd=directory)
    return output.strip()
