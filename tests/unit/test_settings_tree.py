"""Unit tests for the settings tree and its YAML store."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from github_contribute.orchestrator.errors import ConfigurationError
from github_contribute.orchestrator.settings_tree import (
    RepositoryKind,
    Requiredness,
    SettingsStore,
    SettingsTree,
)


def test_defaults_provide_both_collections() -> None:
    tree = SettingsTree()

    assert tree.origin_organization == "neos"
    assert tree.repository_names() == ["flow", "neos"]
    assert tree.access_token == ""

    flow = tree.binding("flow")
    assert flow.origin_repository_name == "flow-development-collection"
    assert flow.package_directory == "Packages/Framework/"
    assert flow.kind is RepositoryKind.COLLECTION
    assert flow.requiredness is Requiredness.REQUIRED
    assert flow.contributor_repository_name == ""
    assert flow.title == "Flow"


def test_loaded_values_override_defaults() -> None:
    tree = SettingsTree(
        {
            "origin": {"repositories": {"neos": {"status": "required"}}},
            "contributor": {"repositories": {"neos": {"name": "my-neos"}}},
        }
    )

    neos = tree.binding("neos")
    assert neos.requiredness is Requiredness.REQUIRED
    assert neos.origin_repository_name == "neos-development-collection"
    assert neos.contributor_repository_name == "my-neos"


def test_dotted_paths_create_intermediate_mappings() -> None:
    tree = SettingsTree()

    tree.set("contributor.repositories.flow.name", "flow-development-collection")

    assert tree.get("contributor.repositories.flow.name") == "flow-development-collection"
    assert tree.get("contributor.repositories.missing.name") is None
    assert tree.get("contributor.repositories.missing.name", "x") == "x"


def test_unknown_repository_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        SettingsTree().binding("typo3")


def test_invalid_repository_type_is_configuration_error() -> None:
    tree = SettingsTree({"origin": {"repositories": {"flow": {"type": "monorepo"}}}})

    with pytest.raises(ConfigurationError):
        tree.binding("flow")


def test_collection_repository_names_skip_packages() -> None:
    tree = SettingsTree(
        {
            "origin": {
                "repositories": {
                    "demo": {
                        "name": "Neos.Demo",
                        "packageDirectory": "Packages/Sites/Neos.Demo/",
                        "type": "package",
                    }
                }
            }
        }
    )

    assert tree.collection_repository_names() == [
        "flow-development-collection",
        "neos-development-collection",
    ]


def test_store_roundtrip_preserves_sibling_keys(tmp_path: Path) -> None:
    path = tmp_path / "Configuration" / "Settings.yaml"
    path.parent.mkdir()
    path.write_text(
        yaml.safe_dump({"Neos": {"Flow": {"core": {"context": "Development"}}}}),
        encoding="utf-8",
    )
    store = SettingsStore(path, key="Neos.Contribute.gitHub")

    tree = store.load()
    tree.set("contributor.accessToken", "secret")
    tree.record_contributor_repository("flow", "flow-development-collection")
    store.save(tree)

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert raw["Neos"]["Flow"]["core"]["context"] == "Development"
    assert raw["Neos"]["Contribute"]["gitHub"]["contributor"]["accessToken"] == "secret"

    reloaded = store.load()
    assert reloaded.access_token == "secret"
    assert reloaded.binding("flow").contributor_repository_name == "flow-development-collection"


def test_store_missing_file_loads_defaults(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "nope.yaml", key="Neos.Contribute.gitHub")

    assert store.load().repository_names() == ["flow", "neos"]


def test_store_rejects_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "Settings.yaml"
    path.write_text("a: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        SettingsStore(path).load()


def test_store_rejects_non_mapping_document(tmp_path: Path) -> None:
    path = tmp_path / "Settings.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        SettingsStore(path).load()
