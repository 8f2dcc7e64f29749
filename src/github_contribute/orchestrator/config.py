"""Process-level configuration.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The contributor's own settings (access token, forks) are not part of this;
they live in the YAML settings tree managed by `SettingsStore`.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ContributeSettings(BaseSettings):
    """Settings for the contribution CLI.

    Environment variables:
    - CONTRIBUTE_ROOT_PATH
    - CONTRIBUTE_SETTINGS_FILE
    - CONTRIBUTE_SETTINGS_KEY
    - CONTRIBUTE_UPSTREAM_URL_TEMPLATE
    - CONTRIBUTE_PATCH_DIRECTORY
    - GITHUB_BASE_URL, GITHUB_WEB_URL, GITHUB_SSH_HOST
    - GERRIT_BASE_URL
    - LOG_LEVEL

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `ContributeSettings(_env_file=path_to_env)`.
    """

    root_path: Path = Field(
        default=Path("."),
        validation_alias="CONTRIBUTE_ROOT_PATH",
        description="Root directory package directories are resolved against",
    )
    settings_file: Path = Field(
        default=Path("Configuration/Settings.yaml"),
        validation_alias="CONTRIBUTE_SETTINGS_FILE",
        description="YAML file holding the contributor settings (relative to the root path)",
    )
    settings_key: str = Field(
        default="Neos.Contribute.gitHub",
        validation_alias="CONTRIBUTE_SETTINGS_KEY",
        description="Dotted path of the contributor settings inside the YAML document",
    )

    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    github_web_url: str = Field(
        default="https://github.com",
        validation_alias="GITHUB_WEB_URL",
        description="Base URL for browsing repositories",
    )
    github_ssh_host: str = Field(
        default="git@github.com",
        validation_alias="GITHUB_SSH_HOST",
        description="SSH user@host used for fork remotes",
    )
    upstream_url_template: str = Field(
        default="https://github.com/{organization}/{repository}.git",
        validation_alias="CONTRIBUTE_UPSTREAM_URL_TEMPLATE",
        description="Anonymous clone URL of the canonical repositories",
    )

    gerrit_base_url: str = Field(
        default="https://review.typo3.org",
        validation_alias="GERRIT_BASE_URL",
        description="Gerrit server the patches are fetched from",
    )
    patch_directory: Path = Field(
        default=Path(tempfile.gettempdir()) / "github-contribute",
        validation_alias="CONTRIBUTE_PATCH_DIRECTORY",
        description="Directory where fetched patch files are written",
    )

    # Interactive output goes to the terminal; logs stay quiet unless asked for.
    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("upstream_url_template")
    @classmethod
    def _require_placeholders(cls, value: str) -> str:
        for placeholder in ("{organization}", "{repository}"):
            if placeholder not in value:
                raise ValueError(f"upstream URL template must contain {placeholder}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def settings_path(self) -> Path:
        """Absolute location of the settings YAML file."""

        if self.settings_file.is_absolute():
            return self.settings_file
        return self.root_path / self.settings_file
