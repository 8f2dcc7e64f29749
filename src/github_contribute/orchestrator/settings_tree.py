"""The persisted settings tree and its YAML store.

The tree is a nested mapping addressed by dotted paths, e.g.
`origin.repositories.flow.name` or `contributor.accessToken`. It is owned by the
orchestrator for a run, mutated in place, and flushed explicitly.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from github_contribute.orchestrator.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "origin": {
        "organization": "neos",
        "repositories": {
            "flow": {
                "name": "flow-development-collection",
                "packageDirectory": "Packages/Framework/",
                "type": "collection",
                "status": "required",
            },
            "neos": {
                "name": "neos-development-collection",
                "packageDirectory": "Packages/Neos/",
                "type": "collection",
                "status": "optional",
            },
        },
    },
    "contributor": {
        "accessToken": "",
        "repositories": {},
    },
}


class RepositoryKind(str, Enum):
    PACKAGE = "package"
    COLLECTION = "collection"


class Requiredness(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"


@dataclass(frozen=True, slots=True)
class RepositoryBinding:
    """One logical repository across the origin and contributor accounts."""

    repository_name: str
    origin_organization: str
    origin_repository_name: str
    contributor_repository_name: str
    package_directory: str
    kind: RepositoryKind
    requiredness: Requiredness

    @property
    def title(self) -> str:
        return self.repository_name[:1].upper() + self.repository_name[1:]

    def resolve_directory(self, root_path: Path) -> Path:
        return root_path / self.package_directory


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _split(path: str) -> list[str]:
    parts = [p for p in path.split(".") if p]
    if not parts:
        raise ValueError("settings path must be non-empty")
    return parts


def get_by_path(data: dict[str, Any], path: str, default: Any = None) -> Any:
    node: Any = data
    for part in _split(path):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def set_by_path(data: dict[str, Any], path: str, value: Any) -> None:
    parts = _split(path)
    node = data
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


class SettingsTree:
    """Mutable nested settings addressed by dotted paths."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = _merge(DEFAULT_SETTINGS, data or {})

    def get(self, path: str, default: Any = None) -> Any:
        return get_by_path(self._data, path, default)

    def get_str(self, path: str) -> str:
        value = self.get(path)
        return "" if value is None else str(value)

    def set(self, path: str, value: Any) -> None:
        set_by_path(self._data, path, value)

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    @property
    def access_token(self) -> str:
        return self.get_str("contributor.accessToken").strip()

    @property
    def origin_organization(self) -> str:
        return self.get_str("origin.organization")

    def repository_names(self) -> list[str]:
        repositories = self.get("origin.repositories") or {}
        if not isinstance(repositories, dict):
            raise ConfigurationError("origin.repositories must be a mapping")
        return list(repositories)

    def binding(self, repository_name: str) -> RepositoryBinding:
        config = self.get(f"origin.repositories.{repository_name}")
        if not isinstance(config, dict):
            raise ConfigurationError(f'Repository "{repository_name}" is not configured')

        try:
            kind = RepositoryKind(config.get("type", RepositoryKind.COLLECTION.value))
            requiredness = Requiredness(config.get("status", Requiredness.OPTIONAL.value))
        except ValueError as e:
            raise ConfigurationError(f'Repository "{repository_name}": {e}') from e

        return RepositoryBinding(
            repository_name=repository_name,
            origin_organization=self.origin_organization,
            origin_repository_name=str(config.get("name") or ""),
            contributor_repository_name=self.get_str(
                f"contributor.repositories.{repository_name}.name"
            ),
            package_directory=str(config.get("packageDirectory") or ""),
            kind=kind,
            requiredness=requiredness,
        )

    def bindings(self) -> list[RepositoryBinding]:
        return [self.binding(name) for name in self.repository_names()]

    def record_contributor_repository(self, repository_name: str, contributor_name: str) -> None:
        self.set(f"contributor.repositories.{repository_name}.name", contributor_name)

    def collection_repository_names(self) -> list[str]:
        return [
            b.origin_repository_name
            for b in self.bindings()
            if b.kind is RepositoryKind.COLLECTION and b.origin_repository_name
        ]


class SettingsStore:
    """YAML-file backed store for the settings tree.

    The tree lives under `key` (a dotted path) inside the document; sibling
    keys written by other tools are preserved on save.
    """

    def __init__(self, path: Path, *, key: str = "") -> None:
        self._path = path
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Settings file {self._path} is not valid YAML: {e}") from e
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Settings file {self._path} must contain a mapping")
        return raw

    def load(self) -> SettingsTree:
        document = self._read_document()
        subtree = get_by_path(document, self._key, {}) if self._key else document
        if subtree is None:
            subtree = {}
        if not isinstance(subtree, dict):
            raise ConfigurationError(f"Settings at {self._key!r} must be a mapping")
        logger.debug("Settings loaded", extra={"path": str(self._path)})
        return SettingsTree(subtree)

    def save(self, tree: SettingsTree) -> None:
        document = self._read_document()
        if self._key:
            set_by_path(document, self._key, tree.as_dict())
        else:
            document = tree.as_dict()

        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            yaml.safe_dump(document, f, default_flow_style=False, indent=2, sort_keys=False)
        logger.info("Settings saved", extra={"path": str(self._path)})
