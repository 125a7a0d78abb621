"""Run a step's ``command`` as a child process.

The child inherits stdin/stdout/stderr so an operator sees exactly what the
sub-tool would print when run by hand. There is no timeout and no retry: a
hung command blocks the workflow until it exits.

Command strings are split on whitespace only. Quoted arguments containing
spaces are not supported; ``contractspec create --name "My API"`` passes
``"My`` and ``API"`` as two arguments.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Protocol

from contractspec_cli.vibe.errors import CommandExitError, CommandSpawnError

logger = logging.getLogger(__name__)


class CommandRunner(Protocol):
    """Anything that can run a step command in a working directory."""

    async def __call__(self, command: str, cwd: Path) -> None: ...


def split_command(command: str) -> list[str]:
    """Split *command* into program and arguments on whitespace."""
    return command.split()


async def run_command(command: str, cwd: Path) -> None:
    """Run *command* in *cwd* and wait for it to exit.

    Raises:
        CommandSpawnError: If the command is empty or the process cannot start.
        CommandExitError: If the process exits with a non-zero code.
    """
    parts = split_command(command)
    if not parts:
        raise CommandSpawnError(command, "empty command")

    program, *args = parts
    # Resolve through PATH the way a shell would (including PATHEXT on Windows).
    resolved = shutil.which(program) or program
    logger.debug(f"Spawning {resolved} {args} in {cwd}")

    try:
        process = await asyncio.create_subprocess_exec(resolved, *args, cwd=str(cwd))
    except OSError as exc:
        raise CommandSpawnError(command, str(exc)) from exc

    exit_code = await process.wait()
    logger.debug(f"Command '{command}' exited with {exit_code}")
    if exit_code != 0:
        raise CommandExitError(command, exit_code)


__all__ = ["CommandRunner", "run_command", "split_command"]
