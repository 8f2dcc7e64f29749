"""Test configuration and fixtures."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from github_contribute.orchestrator.console import Console
from github_contribute.orchestrator.github.client import GitHubClient
from github_contribute.orchestrator.remotes import RemoteReconciler
from github_contribute.orchestrator.settings_tree import SettingsStore, SettingsTree
from github_contribute.orchestrator.shell import ShellExecutor


@pytest.fixture
def settings_tree() -> SettingsTree:
    """Provide a settings tree with a token and the default repositories."""
    return SettingsTree({"contributor": {"accessToken": "test-token"}})


@pytest.fixture
def console() -> Mock:
    """Provide a console that answers nothing unless told to."""
    return Mock(spec=Console)


@pytest.fixture
def hosting() -> Mock:
    """Provide a GitHub client double for user 'jdoe'."""
    mock = Mock(spec=GitHubClient)
    mock.login = "jdoe"
    mock.ssh_url.side_effect = lambda name: f"git@github.com:jdoe/{name}.git"
    mock.http_url.side_effect = lambda name: f"https://github.com/jdoe/{name}"
    return mock


@pytest.fixture
def store() -> Mock:
    return Mock(spec=SettingsStore)


@pytest.fixture
def executor() -> Mock:
    return Mock(spec=ShellExecutor)


@pytest.fixture
def reconciler() -> Mock:
    return Mock(spec=RemoteReconciler)


@pytest.fixture
def root_path(tmp_path: Path) -> Path:
    """Provide a project root with the Flow collection installed."""
    root = tmp_path / "project"
    (root / "Packages" / "Framework" / "TYPO3.Flow").mkdir(parents=True)
    return root
