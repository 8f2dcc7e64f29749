"""Unit tests for the CLI: argument parsing and error-to-exit-status mapping."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest

from github_contribute.orchestrator import main as cli
from github_contribute.orchestrator.contribute import Orchestrator
from github_contribute.orchestrator.errors import (
    APIError,
    CommandExecutionError,
    ConfigurationError,
    DirectoryNotFound,
)
from github_contribute.orchestrator.workflow.patch_transfer import PatchTransferOutcome
from github_contribute.orchestrator.workflow.state_machine import PatchTransferState


@pytest.fixture
def orchestrator(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Mock:
    monkeypatch.chdir(tmp_path)
    mock = Mock(spec=Orchestrator)
    mock.create_pull_request_from_patch.return_value = PatchTransferOutcome(
        patch_id="12345",
        state=PatchTransferState.APPLY_DECLINED,
        history=[PatchTransferState.STARTED],
    )
    monkeypatch.setattr(cli, "build_orchestrator", lambda settings, console: mock)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    return mock


def test_parser_rejects_non_numeric_patch_id() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["create-pull-request-from-patch", "abc"])


def test_parser_setup_force() -> None:
    args = cli.build_parser().parse_args(["setup", "--force"])

    assert args.command == "setup"
    assert args.force is True


def test_setup_success(orchestrator: Mock) -> None:
    assert cli.main(["setup"]) == 0

    orchestrator.setup.assert_called_once_with(force=False)
    orchestrator.close.assert_called_once_with()


def test_transfer_success(orchestrator: Mock) -> None:
    assert cli.main(["create-pull-request-from-patch", "12345"]) == 0

    orchestrator.create_pull_request_from_patch.assert_called_once_with("12345")


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (CommandExecutionError(["git", "push"], 128, "fatal: no remote"), 128),
        (DirectoryNotFound(Path("/missing")), 1),
        (ConfigurationError("no token"), 1),
        (APIError("forbidden", code=3), 3),
        (APIError("no code"), 1),
        (APIError("not found", code=404), 1),
    ],
)
def test_errors_map_to_exit_status(
    orchestrator: Mock,
    error: Exception,
    expected: int,
    capsys: pytest.CaptureFixture[str],
) -> None:
    orchestrator.setup.side_effect = error

    assert cli.main(["setup"]) == expected

    orchestrator.close.assert_called_once_with()
    assert str(error) in capsys.readouterr().err


def test_command_output_is_shown_on_failure(
    orchestrator: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    orchestrator.create_pull_request_from_patch.side_effect = CommandExecutionError(
        ["git", "am"], 1, "error: patch does not apply\n"
    )

    assert cli.main(["create-pull-request-from-patch", "12345"]) == 1

    assert "error: patch does not apply" in capsys.readouterr().err


def test_keyboard_interrupt(orchestrator: Mock) -> None:
    orchestrator.setup.side_effect = KeyboardInterrupt

    assert cli.main(["setup"]) == 130


def test_unexpected_error_returns_1(orchestrator: Mock) -> None:
    orchestrator.setup.side_effect = RuntimeError("bug")

    assert cli.main(["setup"]) == 1


def test_invalid_environment_returns_2(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONTRIBUTE_UPSTREAM_URL_TEMPLATE", "no-placeholders")

    assert cli.main(["setup"]) == 2


def test_unknown_log_level_returns_2(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_LEVEL", "LOUD")

    assert cli.main(["setup"]) == 2
