"""Typed configuration loading.

Configuration lives in an optional `reltag.toml` at the repository root:

    package = "ndc-clickhouse-cli"
    manifest = "Cargo.toml"
    workflow = "deploy-stage.yaml"
    remote = "origin"

    [gate]
    release_prefix = "release-"
    main_branch = "main"

Every key is optional; CLI flags override file values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "GatePolicy",
    "MetadataSource",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "reltag.toml"

DEFAULT_PACKAGE = "ndc-clickhouse-cli"
DEFAULT_MANIFEST = "Cargo.toml"
DEFAULT_WORKFLOW = "deploy-stage.yaml"
DEFAULT_REMOTE = "origin"
DEFAULT_RELEASE_PREFIX = "release-"
DEFAULT_MAIN_BRANCH = "main"

MetadataSource = Literal["cargo", "manifest"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Config cannot be read (io) or does not describe a valid config (invalid)."""

    message: str
    path: Path | None = None
    kind: Literal["io", "invalid"] = "invalid"


@dataclass(frozen=True, slots=True)
class GatePolicy:
    """Which merges count as release merges."""

    release_prefix: str = DEFAULT_RELEASE_PREFIX
    main_branch: str = DEFAULT_MAIN_BRANCH


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    package: str = DEFAULT_PACKAGE
    manifest: str = DEFAULT_MANIFEST
    metadata: MetadataSource = "cargo"
    workflow: str = DEFAULT_WORKFLOW
    remote: str = DEFAULT_REMOTE
    # owner/name passed to gh; None lets gh infer it from the checkout.
    repo: str | None = None
    # None creates a lightweight tag.
    tag_message: str | None = None
    gate: GatePolicy = field(default_factory=GatePolicy)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create a config from parsed TOML.

        Raises:
            ValueError: If `metadata` names an unknown source.
        """
        gate: StrDict = get_table(data, "gate") or {}

        metadata = get_str(data, "metadata") or "cargo"
        if metadata not in ("cargo", "manifest"):
            raise ValueError(f"metadata must be 'cargo' or 'manifest', got {metadata!r}")

        return cls(
            package=get_str(data, "package") or DEFAULT_PACKAGE,
            manifest=get_str(data, "manifest") or DEFAULT_MANIFEST,
            metadata="cargo" if metadata == "cargo" else "manifest",
            workflow=get_str(data, "workflow") or DEFAULT_WORKFLOW,
            remote=get_str(data, "remote") or DEFAULT_REMOTE,
            repo=get_str(data, "repo"),
            tag_message=get_str(data, "tag_message"),
            gate=GatePolicy(
                release_prefix=get_str(gate, "release_prefix") or DEFAULT_RELEASE_PREFIX,
                main_branch=get_str(gate, "main_branch") or DEFAULT_MAIN_BRANCH,
            ),
        )

    def with_overrides(
        self,
        *,
        package: str | None = None,
        manifest: str | None = None,
        metadata: MetadataSource | None = None,
        workflow: str | None = None,
        remote: str | None = None,
        repo: str | None = None,
    ) -> ReleaseConfig:
        """Return a copy with every non-None argument applied."""
        return replace(
            self,
            package=package or self.package,
            manifest=manifest or self.manifest,
            metadata=metadata or self.metadata,
            workflow=workflow or self.workflow,
            remote=remote or self.remote,
            repo=repo or self.repo,
        )

    def manifest_path(self, root: Path) -> Path:
        path = Path(self.manifest)
        return path if path.is_absolute() else root / path


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path, kind="io"))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path, kind="io"))
    except OSError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path, kind="io"))

    try:
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Config is not valid UTF-8: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and validate a reltag.toml file.

    Args:
        path: Path to the config file.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config_or_default(root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load `<root>/reltag.toml`, or defaults when the file does not exist.

    A file that exists but is broken is still an error.
    """
    path = root / CONFIG_FILE_NAME
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
