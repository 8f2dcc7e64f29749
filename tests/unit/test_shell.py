"""Unit tests for the shell command executor.

These run real subprocesses through the current interpreter so they do not
depend on git being installed.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

from github_contribute.orchestrator.console import Console
from github_contribute.orchestrator.errors import CommandExecutionError, DirectoryNotFound
from github_contribute.orchestrator.shell import ShellExecutor, working_directory


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_execute_runs_in_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "repo"
    target.mkdir()

    result = ShellExecutor().execute(_python("import os; print(os.getcwd())"), target)

    assert result.exit_code == 0
    assert Path(result.output.strip()).resolve() == target.resolve()
    assert Path.cwd() == tmp_path.resolve()


def test_execute_merges_stdout_and_stderr(tmp_path: Path) -> None:
    code = "import sys; print('out'); sys.stdout.flush(); print('err', file=sys.stderr)"

    result = ShellExecutor().execute(_python(code), tmp_path)

    assert "out" in result.output
    assert "err" in result.output


def test_failure_aborts_with_exit_status_and_restores_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "repo"
    target.mkdir()

    with pytest.raises(CommandExecutionError) as excinfo:
        ShellExecutor().execute(_python("print('boom'); raise SystemExit(3)"), target)

    assert excinfo.value.exit_code == 3
    assert "boom" in excinfo.value.output
    assert Path.cwd() == tmp_path.resolve()


def test_forced_failure_returns_result(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = ShellExecutor().execute(_python("raise SystemExit(2)"), tmp_path, force=True)

    assert result.exit_code == 2
    assert not result.ok
    assert Path.cwd() == tmp_path.resolve()


def test_missing_directory_is_fatal_and_cwd_untouched(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(DirectoryNotFound) as excinfo:
        ShellExecutor().execute(_python("print('never')"), tmp_path / "missing")

    assert excinfo.value.exit_code == 1
    assert Path.cwd() == tmp_path.resolve()


def test_undecodable_output_is_replaced(tmp_path: Path) -> None:
    code = "import sys; sys.stdout.buffer.write(b'Subject: caf\\xe9\\n')"

    result = ShellExecutor().execute(_python(code), tmp_path)

    assert result.exit_code == 0
    assert result.output == "Subject: caf\ufffd\n"


def test_undecodable_output_survives_in_failure(tmp_path: Path) -> None:
    code = "import sys; sys.stdout.buffer.write(b'caf\\xe9'); sys.exit(4)"

    with pytest.raises(CommandExecutionError) as excinfo:
        ShellExecutor().execute(_python(code), tmp_path)

    assert excinfo.value.exit_code == 4
    assert excinfo.value.output == "caf\ufffd"


def test_missing_directory_is_not_echoed(tmp_path: Path) -> None:
    console = Mock(spec=Console)

    with pytest.raises(DirectoryNotFound):
        ShellExecutor(console).execute(_python("pass"), tmp_path / "missing")

    console.line.assert_not_called()


def test_unknown_program_reports_127(tmp_path: Path) -> None:
    with pytest.raises(CommandExecutionError) as excinfo:
        ShellExecutor().execute(["definitely-not-a-real-program-xyz"], tmp_path)

    assert excinfo.value.exit_code == 127


def test_execute_echoes_command(tmp_path: Path) -> None:
    console = Mock(spec=Console)

    ShellExecutor(console).execute(_python("pass"), tmp_path)

    echoed = console.line.call_args.args[0]
    assert echoed.startswith(f"GIT [{tmp_path}]")


def test_working_directory_restores_on_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "inner"
    target.mkdir()

    with pytest.raises(RuntimeError):
        with working_directory(target):
            assert Path(os.getcwd()).resolve() == target.resolve()
            raise RuntimeError("stop")

    assert Path.cwd() == tmp_path.resolve()
