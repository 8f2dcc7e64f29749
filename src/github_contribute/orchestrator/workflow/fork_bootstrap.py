"""Interactive fork bootstrap for one configured repository.

Ensures the contributor has a fork on GitHub (already recorded, entered by
hand, or created through the API), records it, persists the settings and
then reconciles the local remotes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from github_contribute.orchestrator.console import Console
from github_contribute.orchestrator.errors import ConfigurationError
from github_contribute.orchestrator.github.client import GitHubClient
from github_contribute.orchestrator.remotes import RemoteReconciler
from github_contribute.orchestrator.settings_tree import (
    RepositoryBinding,
    SettingsStore,
    SettingsTree,
)
from github_contribute.orchestrator.workflow.state_machine import (
    FORK_SETUP_TRANSITIONS,
    ForkSetupState,
    StateTracker,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ForkSetupOutcome:
    binding: RepositoryBinding
    state: ForkSetupState
    history: list[ForkSetupState]

    @property
    def configured(self) -> bool:
        return self.state is ForkSetupState.REMOTES_CONFIGURED


class ForkBootstrap:
    def __init__(
        self,
        *,
        console: Console,
        hosting: GitHubClient,
        store: SettingsStore,
        reconciler: RemoteReconciler,
    ) -> None:
        self._console = console
        self._hosting = hosting
        self._store = store
        self._reconciler = reconciler

    def run(self, settings: SettingsTree, repository_name: str) -> ForkSetupOutcome:
        tracker = StateTracker(ForkSetupState.NO_FORK_CONFIGURED, FORK_SETUP_TRANSITIONS)
        binding = settings.binding(repository_name)

        def outcome() -> ForkSetupOutcome:
            return ForkSetupOutcome(
                binding=settings.binding(repository_name),
                state=tracker.state,
                history=tracker.history,
            )

        self._console.line()
        if binding.contributor_repository_name:
            tracker.advance(ForkSetupState.CHECKING_EXISTING_FORK)
            if self._hosting.repository_exists(binding.contributor_repository_name):
                tracker.advance(ForkSetupState.FORK_FOUND)
                self._console.success(
                    f'A fork of the "{repository_name}" repository was found '
                    "in your GitHub account!"
                )
                self._reconciler.reconcile(binding)
                tracker.advance(ForkSetupState.REMOTES_CONFIGURED)
                return outcome()

            url = self._hosting.http_url(binding.contributor_repository_name)
            self._console.line(
                f'A fork of "{repository_name}" was configured, but was not found at "{url}" '
                "in your GitHub account."
            )

        tracker.advance(ForkSetupState.FORK_MISSING_RECORD)
        contributor_name = self._ask_for_fork(binding, tracker)
        if contributor_name is None:
            self._console.note(f'No fork configured for "{binding.title}", remotes left unchanged.')
            return outcome()

        settings.record_contributor_repository(repository_name, contributor_name)
        self._store.save(settings)
        tracker.advance(ForkSetupState.SETTINGS_PERSISTED)
        logger.info(
            "Fork recorded",
            extra={"repository": repository_name, "fork": contributor_name},
        )

        self._reconciler.reconcile(settings.binding(repository_name))
        tracker.advance(ForkSetupState.REMOTES_CONFIGURED)
        return outcome()

    def _ask_for_fork(
        self, binding: RepositoryBinding, tracker: StateTracker[ForkSetupState]
    ) -> str | None:
        """Return the confirmed fork name, or None when the user opts out."""

        title = binding.title
        self._console.heading(f'\nSetup "{title}" Repository')

        if self._console.confirm(
            f'Do you already have a fork of the "{title}" Repository?', default=False
        ):
            tracker.advance(ForkSetupState.RECORD_EXISTING_FORK)
            name = self._console.ask("Please provide the name of your fork (without your username)")
            if not name or not self._hosting.repository_exists(name):
                raise ConfigurationError(
                    f'The fork "{name}" was not found in your GitHub account. Please start again',
                    hint=None,
                )
            return name

        if not self._console.confirm(
            f'Should I fork the "{title}" Repository into your GitHub Account?', default=True
        ):
            tracker.advance(ForkSetupState.FORK_SKIPPED)
            return None

        tracker.advance(ForkSetupState.CREATE_FORK_VIA_API)
        organization = binding.origin_organization
        origin_name = binding.origin_repository_name
        if not organization or not origin_name:
            raise ConfigurationError(
                f'Origin organization or repository name missing for "{binding.repository_name}"'
            )

        fork = self._hosting.fork_repository(organization, origin_name)
        self._console.success(f"Successfully forked {organization}/{origin_name} to {fork.url}")
        return origin_name
