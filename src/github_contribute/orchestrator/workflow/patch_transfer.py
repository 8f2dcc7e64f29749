"""Transfer a Gerrit change into a GitHub pull request.

The pipeline is not transactional. Declining the push confirmation leaves the
new local branch with the applied patch in place; a failing step leaves the
working copy as the last successful step produced it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from github_contribute.orchestrator.console import Console
from github_contribute.orchestrator.errors import ConfigurationError
from github_contribute.orchestrator.gerrit.client import GerritClient
from github_contribute.orchestrator.github.client import GitHubClient
from github_contribute.orchestrator.remotes import (
    DEFAULT_COLLECTION_NAMES,
    RemoteMatcher,
    resolve_remote_repository,
)
from github_contribute.orchestrator.settings_tree import SettingsTree
from github_contribute.orchestrator.shell import CommandResult, ShellExecutor
from github_contribute.orchestrator.workflow.state_machine import (
    PATCH_TRANSFER_TRANSITIONS,
    PatchTransferState,
    StateTracker,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PatchRequest:
    """Everything resolved about one patch before git is touched.

    `collection_path` is the parent of `package_path` and the working
    directory of every git command in the run.
    """

    patch_id: str
    package_key: str
    package_path: Path
    collection_path: Path
    patch_file_path: Path


@dataclass(frozen=True, slots=True)
class PatchTransferOutcome:
    patch_id: str
    state: PatchTransferState
    history: list[PatchTransferState]
    pull_request_url: str | None = None


def strip_subject(subject: str, message: str) -> str:
    """Commit message without its subject line, used as the pull request body.

    Every literal occurrence of the subject is removed, not only the first line.
    """

    if not subject:
        return message
    return message.replace(subject, "")


class PatchTransferPipeline:
    def __init__(
        self,
        *,
        console: Console,
        executor: ShellExecutor,
        hosting: GitHubClient,
        review: GerritClient,
        matcher: RemoteMatcher | None = None,
    ) -> None:
        self._console = console
        self._executor = executor
        self._hosting = hosting
        self._review = review
        self._matcher = matcher

    def _git(self, request: PatchRequest, *args: str) -> CommandResult:
        result = self._executor.execute(["git", *args], request.collection_path)
        if result.output:
            self._console.line(result.output.rstrip("\n"))
        return result

    def _matcher_for(self, settings: SettingsTree) -> RemoteMatcher:
        if self._matcher is not None:
            return self._matcher
        return RemoteMatcher(settings.collection_repository_names() or DEFAULT_COLLECTION_NAMES)

    def resolve(self, patch_id: str) -> PatchRequest:
        self._console.line("Requesting patch details from Gerrit.")
        package = self._review.resolve_target_package(patch_id)
        self._console.line(
            f"Determined {package.package_key} as the target package key for this change."
        )

        patch_file = self._review.fetch_patch_file(patch_id)
        self._console.success("Successfully fetched changeset from Gerrit.")

        return PatchRequest(
            patch_id=patch_id,
            package_key=package.package_key,
            package_path=package.package_path,
            collection_path=package.package_path.parent,
            patch_file_path=patch_file,
        )

    def run(self, settings: SettingsTree, patch_id: str) -> PatchTransferOutcome:
        tracker = StateTracker(PatchTransferState.STARTED, PATCH_TRANSFER_TRANSITIONS)

        def outcome(url: str | None = None) -> PatchTransferOutcome:
            return PatchTransferOutcome(
                patch_id=patch_id,
                state=tracker.state,
                history=tracker.history,
                pull_request_url=url,
            )

        try:
            self._hosting.authenticate(settings)
        except ConfigurationError:
            self._console.error("It was not possible to authenticate with GitHub.")
            raise
        tracker.advance(PatchTransferState.AUTHENTICATED)

        request = self.resolve(patch_id)
        tracker.advance(PatchTransferState.PATCH_RESOLVED)

        patch_file = str(request.patch_file_path)
        self._console.line(
            f"The following changes will be applied to package {request.package_key}"
        )
        self._git(request, "apply", "--directory", request.package_key, "--check", patch_file)
        self._git(request, "apply", "--directory", request.package_key, "--stat", patch_file)
        tracker.advance(PatchTransferState.PREVIEW_GENERATED)

        if not self._console.confirm("\nWould you like to apply this patch?", default=True):
            tracker.advance(PatchTransferState.APPLY_DECLINED)
            return outcome()
        tracker.advance(PatchTransferState.APPLY_CONFIRMED)

        self._git(request, "fetch", "upstream", "master")
        self._git(request, "checkout", "-b", patch_id, "upstream/master")
        tracker.advance(PatchTransferState.BRANCH_CREATED)

        self._git(request, "am", "--directory", request.package_key, patch_file)
        self._console.success(f"Successfully applied patch {patch_id}")
        tracker.advance(PatchTransferState.PATCH_APPLIED)

        if not self._console.confirm(
            "\nWould you like to push the change to your repository and create a pull request?",
            default=True,
        ):
            self._console.note(
                f'Branch "{patch_id}" with the applied patch was left in {request.collection_path}.'
            )
            tracker.advance(PatchTransferState.PUSH_DECLINED)
            return outcome()
        tracker.advance(PatchTransferState.PUSH_CONFIRMED)

        repository = resolve_remote_repository(
            self._executor, request.package_path, self._matcher_for(settings)
        )
        self._git(request, "push", "origin", patch_id)
        tracker.advance(PatchTransferState.PUSHED)

        details = self._review.commit_details(patch_id)
        pull_request = self._hosting.open_pull_request(
            repository,
            patch_id,
            details.subject,
            strip_subject(details.subject, details.message),
        )
        self._console.success(
            f"Successfully opened a pull request {pull_request.url} for patch {patch_id}"
        )
        logger.info(
            "Pull request opened",
            extra={"patch_id": patch_id, "repository": repository, "url": pull_request.url},
        )
        tracker.advance(PatchTransferState.PULL_REQUEST_OPENED)

        self._git(request, "checkout", "master")
        tracker.advance(PatchTransferState.CLEANUP)
        return outcome(pull_request.url)
