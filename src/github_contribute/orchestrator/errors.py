"""Error taxonomy for the contribution workflows.

Every failure in a collaborator call or command execution is fatal to the
current invocation. Stages raise one of these and `main()` maps it to an exit
status; nothing below the CLI terminates the process.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

SETUP_HINT = "Please run `contribute setup` first."


def _exit_status(code: int | None) -> int:
    # Process exit statuses are a single byte; anything else degrades to a plain failure.
    if code is None or not 0 < code < 256:
        return 1
    return code


class ContributeError(Exception):
    """Base class for fatal errors that abort the current run."""

    def __init__(self, message: str, *, exit_code: int = 1, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = _exit_status(exit_code)
        self.hint = hint


class ConfigurationError(ContributeError):
    """A credential or settings path is missing or invalid."""

    def __init__(self, message: str, *, hint: str | None = SETUP_HINT) -> None:
        super().__init__(message, hint=hint)


class DirectoryNotFound(ContributeError):
    def __init__(self, path: Path) -> None:
        super().__init__(
            f'Directory "{path}" does not exist, '
            "maybe your git remotes are not configured correctly",
            hint=SETUP_HINT,
        )
        self.path = path


class CommandExecutionError(ContributeError):
    """A command exited non-zero and was not forced."""

    def __init__(self, command: Sequence[str], exit_code: int, output: str) -> None:
        super().__init__(
            f"Command `{' '.join(command)}` failed with exit status {exit_code}",
            exit_code=exit_code,
        )
        self.command = list(command)
        self.returncode = exit_code
        self.output = output


class APIError(ContributeError):
    """A hosting-platform or review-system call failed."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message, exit_code=code if code is not None else 1)
        self.code = code


class RemoteNotRecognized(ContributeError):
    def __init__(self, directory: Path, candidates: Sequence[str]) -> None:
        names = ", ".join(candidates) or "<none>"
        super().__init__(
            f'The origin remote of "{directory}" does not point at a known repository ({names})',
            hint=SETUP_HINT,
        )
        self.directory = directory
        self.candidates = list(candidates)
