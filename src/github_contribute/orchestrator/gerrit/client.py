"""Review-system client for the Gerrit REST API.

Only anonymous endpoints are used: change lookup, the current revision's
commit and its mailbox-formatted patch.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from github_contribute.orchestrator.errors import APIError, ConfigurationError

logger = logging.getLogger(__name__)

# Gerrit prefixes JSON responses to defeat XSSI.
_XSSI_PREFIX = ")]}'"


@dataclass(frozen=True, slots=True)
class TargetPackage:
    package_key: str
    package_path: Path


@dataclass(frozen=True, slots=True)
class CommitDetails:
    subject: str
    message: str


class GerritClient:
    """Small wrapper around the Gerrit REST endpoints we need."""

    def __init__(
        self,
        *,
        base_url: str,
        root_path: Path,
        package_directories: Sequence[str],
        patch_directory: Path,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not base_url.strip():
            raise ValueError("Gerrit base URL is required")
        self._base_url = base_url.rstrip("/")
        self._root_path = root_path
        self._package_directories = list(package_directories)
        self._patch_directory = patch_directory
        self._session = session or requests.Session()
        self._timeout = timeout

    def _change_url(self, patch_id: str, suffix: str = "") -> str:
        if suffix and not suffix.startswith("/"):
            suffix = "/" + suffix
        return f"{self._base_url}/changes/{patch_id}{suffix}"

    def _get(self, url: str, *, params: dict[str, Any] | None = None) -> str:
        logger.debug("Gerrit request", extra={"url": url})
        try:
            resp = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise APIError(f"Gerrit request to {url} failed: {e}") from e
        if resp.status_code >= 400:
            raise APIError(
                f"Gerrit request to {url} failed: {resp.status_code} {resp.text.strip()}",
                code=resp.status_code,
            )
        return resp.text

    def _get_json(self, url: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        text = self._get(url, params=params)
        if text.startswith(_XSSI_PREFIX):
            text = text[len(_XSSI_PREFIX) :]
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise APIError(f"Unexpected Gerrit response from {url}: {e}") from e
        if not isinstance(data, dict):
            raise APIError(f"Unexpected Gerrit response from {url}: expected an object")
        return data

    def _locate_package(self, package_key: str) -> Path:
        for directory in self._package_directories:
            candidate = self._root_path / directory / package_key
            if candidate.is_dir():
                return candidate
        raise ConfigurationError(
            f'Package "{package_key}" was not found below any configured package directory',
            hint="Check your composer.json and run composer update first.",
        )

    def resolve_target_package(self, patch_id: str) -> TargetPackage:
        """Return the local package a change targets."""

        change = self._get_json(self._change_url(patch_id), params={"o": "CURRENT_REVISION"})
        project = change.get("project")
        if not isinstance(project, str) or not project.strip():
            raise APIError(f"Gerrit change {patch_id} has no project")

        package_key = project.rstrip("/").rsplit("/", 1)[-1]
        package_path = self._locate_package(package_key)
        logger.info(
            "Resolved target package",
            extra={"patch_id": patch_id, "package_key": package_key},
        )
        return TargetPackage(package_key=package_key, package_path=package_path)

    def fetch_patch_file(self, patch_id: str) -> Path:
        """Download the current revision as a mailbox patch and return its path."""

        encoded = self._get(self._change_url(patch_id, "revisions/current/patch"))
        try:
            patch = base64.b64decode(encoded.strip(), validate=False)
        except (binascii.Error, ValueError) as e:
            raise APIError(f"Gerrit returned an undecodable patch for {patch_id}: {e}") from e

        self._patch_directory.mkdir(parents=True, exist_ok=True)
        path = self._patch_directory / f"{patch_id}.patch"
        path.write_bytes(patch)
        logger.info("Patch fetched", extra={"patch_id": patch_id, "path": str(path)})
        return path

    def commit_details(self, patch_id: str) -> CommitDetails:
        data = self._get_json(self._change_url(patch_id, "revisions/current/commit"))
        subject = data.get("subject")
        message = data.get("message")
        if not isinstance(subject, str) or not isinstance(message, str):
            raise APIError(f"Gerrit commit details for {patch_id} are incomplete")
        return CommitDetails(subject=subject, message=message)

    def close(self) -> None:
        self._session.close()
