"""Remote configuration of local working copies.

`origin` points at the contributor's fork, `upstream` at the canonical
repository (anonymous transport) with pull-request refs exposed as
`refs/remotes/upstream/pr/*`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from github_contribute.orchestrator.errors import ConfigurationError, RemoteNotRecognized
from github_contribute.orchestrator.settings_tree import RepositoryBinding
from github_contribute.orchestrator.shell import ShellExecutor

logger = logging.getLogger(__name__)

DEFAULT_UPSTREAM_URL_TEMPLATE = "https://github.com/{organization}/{repository}.git"
DEFAULT_COLLECTION_NAMES = ("flow-development-collection", "neos-development-collection")
PULL_REQUEST_REFSPEC = "+refs/pull/*/head:refs/remotes/upstream/pr/*"


class SshUrlBuilder(Protocol):
    def ssh_url(self, name: str) -> str: ...


class RemoteReconciler:
    """Rewrites `origin`/`upstream` of one working copy; safe to run repeatedly."""

    def __init__(
        self,
        *,
        executor: ShellExecutor,
        hosting: SshUrlBuilder,
        root_path: Path,
        upstream_url_template: str = DEFAULT_UPSTREAM_URL_TEMPLATE,
    ) -> None:
        self._executor = executor
        self._hosting = hosting
        self._root_path = root_path
        self._upstream_url_template = upstream_url_template

    def upstream_url(self, binding: RepositoryBinding) -> str:
        return self._upstream_url_template.format(
            organization=binding.origin_organization,
            repository=binding.origin_repository_name,
        )

    def reconcile(self, binding: RepositoryBinding) -> None:
        if not binding.contributor_repository_name:
            raise ConfigurationError(
                f'No fork is recorded for the "{binding.repository_name}" repository'
            )

        directory = binding.resolve_directory(self._root_path)
        origin_url = self._hosting.ssh_url(binding.contributor_repository_name)
        run = self._executor.execute

        run(["git", "remote", "rm", "origin"], directory, force=True)
        run(["git", "remote", "add", "origin", origin_url], directory)
        run(["git", "remote", "rm", "upstream"], directory, force=True)
        run(["git", "remote", "add", "upstream", self.upstream_url(binding)], directory)
        run(["git", "fetch", "--all"], directory)
        run(["git", "branch", "-u", "origin/master", "master"], directory)
        run(["git", "config", "--add", "remote.upstream.fetch", PULL_REQUEST_REFSPEC], directory)

        logger.info(
            "Remotes configured",
            extra={"repository": binding.repository_name, "directory": str(directory)},
        )


class RemoteMatcher:
    """Recognizes which known repository a `git remote show` fetch URL refers to."""

    def __init__(self, repository_names: Iterable[str]) -> None:
        self._names = [n for n in dict.fromkeys(repository_names) if n]
        alternatives = "|".join(re.escape(n) for n in self._names)
        self._pattern = re.compile(rf"Fetch.*?[/:]({alternatives})\.git") if self._names else None

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def match(self, remote_info: str) -> str | None:
        if self._pattern is None:
            return None
        found = self._pattern.search(remote_info)
        return found.group(1) if found else None


def resolve_remote_repository(
    executor: ShellExecutor, directory: Path, matcher: RemoteMatcher
) -> str:
    """Return the repository name the working copy's `origin` fetches from."""

    result = executor.execute(["git", "remote", "show", "origin"], directory)
    name = matcher.match(result.output)
    if name is None:
        raise RemoteNotRecognized(directory, matcher.names)
    return name
