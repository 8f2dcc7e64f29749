"""Hosting-platform client wrapping PyGithub.

This keeps GitHub calls out of the workflow code and makes tests easy: flows
only depend on the small surface below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from github import Auth, Github, GithubException, UnknownObjectException
from github.AuthenticatedUser import AuthenticatedUser

from github_contribute.orchestrator.errors import APIError, ConfigurationError
from github_contribute.orchestrator.settings_tree import SettingsTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ForkedRepository:
    full_name: str
    url: str


@dataclass(frozen=True, slots=True)
class OpenedPullRequest:
    number: int
    url: str


def _api_error(action: str, e: GithubException) -> APIError:
    message = e.data.get("message") if isinstance(e.data, dict) else None
    return APIError(f"{action}: {message or e}", code=e.status)


class GitHubClient:
    """The operations the contribution workflows need from GitHub."""

    def __init__(
        self,
        *,
        base_url: str = "https://api.github.com",
        web_url: str = "https://github.com",
        ssh_host: str = "git@github.com",
        github_api: Github | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._web_url = web_url.rstrip("/")
        self._ssh_host = ssh_host
        self._github = github_api
        self._user: AuthenticatedUser | None = None
        self._login = ""
        self._organization = ""

    @property
    def login(self) -> str:
        self._require_auth()
        return self._login

    def _require_auth(self) -> Github:
        if self._github is None or not self._login:
            raise ConfigurationError("Not authenticated with GitHub")
        return self._github

    def authenticate(self, settings: SettingsTree) -> None:
        """Authenticate with the contributor's access token from `settings`."""

        token = settings.access_token
        if not token:
            raise ConfigurationError("No GitHub access token configured (contributor.accessToken)")

        if self._github is None:
            self._github = Github(auth=Auth.Token(token), base_url=self._base_url)

        try:
            user = self._github.get_user()
            login = user.login
        except GithubException as e:
            raise _api_error("Authentication with GitHub failed", e) from e

        self._user = user
        self._login = login
        self._organization = settings.origin_organization
        logger.info("Authenticated with GitHub", extra={"login": login})

    def repository_exists(self, name: str) -> bool:
        github = self._require_auth()
        full_name = f"{self._login}/{name}"
        try:
            github.get_repo(full_name)
        except UnknownObjectException:
            logger.debug("Repository not found", extra={"repo": full_name})
            return False
        except GithubException as e:
            raise _api_error(f"Checking repository {full_name} failed", e) from e
        return True

    def http_url(self, name: str) -> str:
        return f"{self._web_url}/{self.login}/{name}"

    def ssh_url(self, name: str) -> str:
        return f"{self._ssh_host}:{self.login}/{name}.git"

    def fork_repository(self, organization: str, name: str) -> ForkedRepository:
        github = self._require_auth()
        assert self._user is not None
        try:
            source = github.get_repo(f"{organization}/{name}")
            fork = self._user.create_fork(source)
        except GithubException as e:
            raise _api_error(f"Error while forking {organization}/{name}", e) from e

        logger.info("Repository forked", extra={"source": f"{organization}/{name}"})
        return ForkedRepository(full_name=fork.full_name, url=fork.html_url)

    def open_pull_request(
        self,
        repository: str,
        branch: str,
        title: str,
        body: str,
        *,
        base: str = "master",
    ) -> OpenedPullRequest:
        """Open a pull request from `<login>:<branch>` against the origin repository."""

        github = self._require_auth()
        full_name = f"{self._organization}/{repository}"
        try:
            upstream = github.get_repo(full_name)
            pr = upstream.create_pull(
                title=title,
                body=body,
                head=f"{self._login}:{branch}",
                base=base,
            )
        except GithubException as e:
            raise _api_error(f"Creating pull request on {full_name} failed", e) from e

        logger.info("Pull request created", extra={"repo": full_name, "number": pr.number})
        return OpenedPullRequest(number=pr.number, url=pr.html_url)

    def close(self) -> None:
        if self._github is not None:
            self._github.close()
