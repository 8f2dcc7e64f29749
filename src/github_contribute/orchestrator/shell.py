"""Blocking execution of external commands (git) in a given working copy.

The process-wide current directory is treated as a scoped resource: it is
switched for the duration of one command and restored on every exit path,
including failures, before the error propagates to the CLI.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from github_contribute.orchestrator.console import Console
from github_contribute.orchestrator.errors import CommandExecutionError, DirectoryNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Exit status and merged stdout/stderr of one command."""

    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Switch the process into `path`, always switching back afterwards."""

    previous = Path.cwd()
    try:
        os.chdir(path)
    except (FileNotFoundError, NotADirectoryError) as e:
        raise DirectoryNotFound(path) from e
    try:
        yield path
    finally:
        os.chdir(previous)


class ShellExecutor:
    """Runs one command at a time; non-zero exits are fatal unless forced."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console

    def execute(
        self,
        command: Sequence[str],
        working_directory_path: Path,
        *,
        force: bool = False,
    ) -> CommandResult:
        display = shlex.join(command)

        with working_directory(working_directory_path):
            if self._console is not None:
                self._console.line(f"GIT [{working_directory_path}] {display}")
            logger.debug(
                "Executing command",
                extra={"command": display, "cwd": str(working_directory_path)},
            )
            try:
                completed = subprocess.run(
                    list(command),
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    encoding="utf-8",
                    errors="replace",
                    check=False,
                )
                result = CommandResult(
                    exit_code=completed.returncode, output=completed.stdout or ""
                )
            except FileNotFoundError as e:
                # Same status a shell reports for an unknown program.
                result = CommandResult(exit_code=127, output=str(e))

        if result.ok:
            return result

        if force:
            logger.info(
                "Ignoring failed command",
                extra={"command": display, "exit_code": result.exit_code},
            )
            return result

        logger.error(
            "Command failed",
            extra={"command": display, "exit_code": result.exit_code},
        )
        raise CommandExecutionError(command, result.exit_code, result.output)
