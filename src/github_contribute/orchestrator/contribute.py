"""Top-level entry points sequencing the contribution workflows.

The orchestrator owns the settings tree for the duration of a run and passes
it by reference to each stage. Settings are flushed at explicit checkpoints:
after authentication and after each fork decision.
"""

from __future__ import annotations

import logging
from pathlib import Path

from github_contribute.orchestrator.console import Console
from github_contribute.orchestrator.gerrit.client import GerritClient
from github_contribute.orchestrator.github.client import GitHubClient
from github_contribute.orchestrator.settings_tree import (
    RepositoryBinding,
    RepositoryKind,
    Requiredness,
    SettingsStore,
    SettingsTree,
)
from github_contribute.orchestrator.workflow.fork_bootstrap import ForkBootstrap, ForkSetupOutcome
from github_contribute.orchestrator.workflow.patch_transfer import (
    PatchTransferOutcome,
    PatchTransferPipeline,
)

logger = logging.getLogger(__name__)

TOKEN_URL = "https://github.com/settings/tokens/new"
CONTRIBUTION_FAQ_URL = "https://www.neos.io/develop/contribute.html"


class Orchestrator:
    def __init__(
        self,
        *,
        console: Console,
        store: SettingsStore,
        hosting: GitHubClient,
        review: GerritClient,
        bootstrap: ForkBootstrap,
        pipeline: PatchTransferPipeline,
        root_path: Path,
        settings: SettingsTree | None = None,
    ) -> None:
        self._console = console
        self._store = store
        self._hosting = hosting
        self._review = review
        self._bootstrap = bootstrap
        self._pipeline = pipeline
        self._root_path = root_path
        self._settings = settings

    @property
    def settings(self) -> SettingsTree:
        if self._settings is None:
            self._settings = self._store.load()
        return self._settings

    def setup(self, *, force: bool = False) -> list[ForkSetupOutcome]:
        """Configure forks and remotes for every configured repository."""

        console = self._console
        console.heading("\nWelcome to Flow / Neos Development")
        console.line(
            "This wizard gets your environment up and running to easily contribute\n"
            "code or documentation to the Neos Project.\n"
        )

        self.setup_access_token()

        outcomes: list[ForkSetupOutcome] = []
        for binding in self.settings.bindings():
            if not self._is_installed(binding):
                continue
            if force or console.confirm(self._setup_question(binding), default=True):
                outcomes.append(self._bootstrap.run(self.settings, binding.repository_name))

        console.line()
        console.line(
            "If you install new packages from the Neos organisation, feel free to run the "
            "`contribute setup` command again."
        )
        console.success("\nEverything is set up correctly.")
        console.success(f"\nRead the contribution FAQ for more information: {CONTRIBUTION_FAQ_URL}")
        return outcomes

    def setup_access_token(self) -> None:
        settings = self.settings
        if not settings.access_token:
            self._console.line(
                "In order to perform actions on GitHub, you have to configure an access token.\n"
                f"This can be done on {TOKEN_URL}.\n"
                "Note that this wizard only needs the 'public_repo' scope."
            )
            token = self._console.ask_hidden(
                "Please enter your GitHub access token (will not be displayed)"
            )
            settings.set("contributor.accessToken", token)

        self._hosting.authenticate(settings)
        self._console.success("Authentication to GitHub was successful!")
        self._store.save(settings)

    def create_pull_request_from_patch(self, patch_id: str) -> PatchTransferOutcome:
        return self._pipeline.run(self.settings, patch_id)

    def _is_installed(self, binding: RepositoryBinding) -> bool:
        directory = binding.resolve_directory(self._root_path)
        if directory.is_dir():
            return True

        self._console.line()
        if binding.requiredness is Requiredness.REQUIRED:
            self._console.error(
                f"Looks like you do not have the {binding.title} Development Collection "
                f"locally ({directory})"
            )
            self._console.line("Check your composer.json and run composer update first")
        else:
            self._console.note(
                f'Repository "{binding.title}" skipped, because not installed locally'
            )
        logger.info(
            "Repository not installed",
            extra={"repository": binding.repository_name, "directory": str(directory)},
        )
        return False

    @staticmethod
    def _setup_question(binding: RepositoryBinding) -> str:
        if binding.kind is RepositoryKind.PACKAGE:
            path = binding.package_directory
            return f"\nWould you like to setup/check the package at path '{path}'?"
        return f"\nWould you like to setup/check the {binding.title} Development Collection?"

    def close(self) -> None:
        self._hosting.close()
        self._review.close()
