"""Tests for reltag.core.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from reltag.core.config import (
    GatePolicy,
    ReleaseConfig,
    load_config,
    load_config_or_default,
)
from reltag.core.result import Err, Ok


class TestReleaseConfig:
    def test_defaults(self) -> None:
        config = ReleaseConfig()
        assert config.package == "ndc-clickhouse-cli"
        assert config.manifest == "Cargo.toml"
        assert config.metadata == "cargo"
        assert config.workflow == "deploy-stage.yaml"
        assert config.remote == "origin"
        assert config.repo is None
        assert config.tag_message is None
        assert config.gate == GatePolicy(release_prefix="release-", main_branch="main")

    def test_frozen(self) -> None:
        config = ReleaseConfig()
        with pytest.raises(AttributeError):
            config.package = "other"  # type: ignore[misc]

    def test_from_dict(self) -> None:
        config = ReleaseConfig.from_dict(
            {
                "package": "my-cli",
                "metadata": "manifest",
                "workflow": "deploy.yml",
                "repo": "acme/my-cli",
                "tag_message": "Release",
                "gate": {"release_prefix": "rel/", "main_branch": "trunk"},
            }
        )
        assert config.package == "my-cli"
        assert config.metadata == "manifest"
        assert config.workflow == "deploy.yml"
        assert config.remote == "origin"
        assert config.repo == "acme/my-cli"
        assert config.tag_message == "Release"
        assert config.gate == GatePolicy(release_prefix="rel/", main_branch="trunk")

    def test_from_dict_ignores_wrong_types(self) -> None:
        config = ReleaseConfig.from_dict({"package": 12, "gate": "main"})
        assert config.package == "ndc-clickhouse-cli"
        assert config.gate == GatePolicy()

    def test_from_dict_rejects_unknown_metadata_source(self) -> None:
        with pytest.raises(ValueError, match="metadata"):
            ReleaseConfig.from_dict({"metadata": "npm"})

    def test_with_overrides_skips_none(self) -> None:
        base = ReleaseConfig(workflow="deploy.yml", remote="upstream")
        config = base.with_overrides(package="other", workflow=None, remote="origin")
        assert config.package == "other"
        assert config.workflow == "deploy.yml"
        assert config.remote == "origin"

    def test_manifest_path(self, tmp_path: Path) -> None:
        assert ReleaseConfig().manifest_path(tmp_path) == tmp_path / "Cargo.toml"
        absolute = tmp_path / "elsewhere" / "Cargo.toml"
        config = ReleaseConfig(manifest=str(absolute))
        assert config.manifest_path(Path("/repo")) == absolute


class TestLoadConfig:
    def test_load_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "reltag.toml"
        path.write_text(
            'package = "my-cli"\n\n[gate]\nmain_branch = "trunk"\n',
            encoding="utf-8",
        )
        result = load_config(path)
        assert isinstance(result, Ok)
        assert result.value.package == "my-cli"
        assert result.value.gate.main_branch == "trunk"
        assert result.value.gate.release_prefix == "release-"

    def test_missing_file_is_io_error(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "reltag.toml")
        assert isinstance(result, Err)
        assert result.error.kind == "io"
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "reltag.toml"
        path.write_text("package = \n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid"
        assert "Invalid TOML" in result.error.message

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "reltag.toml"
        path.write_text('metadata = "npm"\n', encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.path == path


class TestLoadConfigOrDefault:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path) == Ok(ReleaseConfig())

    def test_reads_file_in_root(self, tmp_path: Path) -> None:
        (tmp_path / "reltag.toml").write_text('remote = "upstream"\n', encoding="utf-8")
        result = load_config_or_default(tmp_path)
        assert isinstance(result, Ok)
        assert result.value.remote == "upstream"

    def test_broken_file_is_still_an_error(self, tmp_path: Path) -> None:
        (tmp_path / "reltag.toml").write_text("[gate\n", encoding="utf-8")
        assert isinstance(load_config_or_default(tmp_path), Err)
