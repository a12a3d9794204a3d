"""Package version lookup.

Two readers implement MetadataReader:

- CargoMetadataReader asks cargo itself (`cargo metadata`), so workspace
  inheritance and path rules are exactly cargo's.
- CargoManifestReader parses Cargo.toml files directly, for runners without a
  Rust toolchain.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Protocol

from reltag.core.result import Err, Ok, Result
from reltag.core.structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    get_bool,
    get_list,
    get_str,
    get_table,
)
from reltag.platform.process import run as run_process
from reltag.release.errors import MetadataError
from reltag.release.model import PackageVersion
from reltag.release.timeouts import CARGO_METADATA_TIMEOUT_SECONDS

_GLOB_CHARS = frozenset("*?[")


class MetadataReader(Protocol):
    def read_version(self, manifest: Path, package: str) -> Result[PackageVersion, MetadataError]:
        """Return the declared version of `package` in `manifest`. Never writes."""
        ...


def parse_cargo_metadata(payload: str, package: str) -> Result[PackageVersion, MetadataError]:
    """Select `.packages[] | select(.name == package) | .version` from cargo output."""
    try:
        obj: object = json.loads(payload)
    except json.JSONDecodeError as e:
        return Err(
            MetadataError(
                package=package,
                message=f"invalid JSON from cargo metadata: {e}",
            )
        )

    data = as_str_dict(obj)
    packages = get_list(data, "packages") if data is not None else None
    if packages is None:
        return Err(
            MetadataError(
                package=package,
                message="unexpected cargo metadata payload: missing packages",
            )
        )

    versions: list[str] = []
    for item in packages:
        d = as_str_dict(item)
        if d is None or get_str(d, "name") != package:
            continue
        version = get_str(d, "version")
        if version is None:
            return Err(MetadataError(package=package, message=f"package {package} has no version"))
        if version not in versions:
            versions.append(version)

    if not versions:
        return Err(
            MetadataError(
                package=package,
                message=f"package {package} not found in cargo metadata",
                hint="check the package name in reltag.toml or --package",
            )
        )
    if len(versions) > 1:
        return Err(
            MetadataError(
                package=package,
                message=f"package {package} is declared with several versions",
                hint=", ".join(versions),
            )
        )
    return Ok(PackageVersion(package_name=package, version=versions[0]))


class CargoMetadataReader:
    """Reads versions through `cargo metadata --format-version=1`."""

    def read_version(self, manifest: Path, package: str) -> Result[PackageVersion, MetadataError]:
        cmd = [
            "cargo",
            "metadata",
            "--format-version=1",
            "--no-deps",
            "--manifest-path",
            str(manifest),
        ]
        result = run_process(cmd, cwd=manifest.parent, timeout=CARGO_METADATA_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                MetadataError(
                    package=package,
                    message=f"cargo metadata failed for {manifest}",
                    hint=result.error.detail(),
                )
            )
        return parse_cargo_metadata(result.value, package)


class CargoManifestReader:
    """Reads versions straight from Cargo.toml, following workspace members."""

    def read_version(self, manifest: Path, package: str) -> Result[PackageVersion, MetadataError]:
        root = _load_manifest(manifest, package)
        if isinstance(root, Err):
            return root

        workspace = get_table(root.value, "workspace") or {}
        workspace_version = get_str(get_table(workspace, "package") or {}, "version")

        pkg = get_table(root.value, "package")
        if pkg is not None and get_str(pkg, "name") == package:
            return _declared_version(pkg, workspace_version, manifest=manifest, package=package)

        for member_manifest in _member_manifests(manifest.parent, workspace):
            member = _load_manifest(member_manifest, package)
            if isinstance(member, Err):
                return member
            member_pkg = get_table(member.value, "package")
            if member_pkg is not None and get_str(member_pkg, "name") == package:
                return _declared_version(
                    member_pkg, workspace_version, manifest=member_manifest, package=package
                )

        return Err(
            MetadataError(
                package=package,
                message=f"package {package} not found in {manifest}",
                hint="check the package name in reltag.toml or --package",
            )
        )


def _load_manifest(path: Path, package: str) -> Result[StrDict, MetadataError]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            MetadataError(package=package, message=f"failed to read {path}: {e}", hint=str(path))
        )

    try:
        obj: object = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        return Err(
            MetadataError(package=package, message=f"invalid TOML in {path}: {e}", hint=str(path))
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(MetadataError(package=package, message=f"invalid TOML root in {path}"))
    return Ok(data)


def _member_manifests(root: Path, workspace: StrDict) -> list[Path]:
    members = as_obj_list(workspace.get("members")) or []
    out: list[Path] = []
    for pattern in members:
        if not isinstance(pattern, str) or not pattern.strip():
            continue
        if any(c in _GLOB_CHARS for c in pattern):
            dirs = sorted(root.glob(pattern))
        else:
            dirs = [root / pattern]
        for d in dirs:
            candidate = d / "Cargo.toml"
            if candidate.is_file() and candidate not in out:
                out.append(candidate)
    return out


def _declared_version(
    pkg: StrDict,
    workspace_version: str | None,
    *,
    manifest: Path,
    package: str,
) -> Result[PackageVersion, MetadataError]:
    # version.workspace = true
    inherited = get_table(pkg, "version")
    if inherited is not None:
        if get_bool(inherited, "workspace") is not True:
            return Err(
                MetadataError(
                    package=package,
                    message=f"unsupported version table for {package} in {manifest}",
                )
            )
        if workspace_version is None:
            return Err(
                MetadataError(
                    package=package,
                    message=f"{package} inherits its version but [workspace.package] has none",
                    hint=str(manifest),
                )
            )
        return Ok(PackageVersion(package_name=package, version=workspace_version))

    version = get_str(pkg, "version")
    if version is None:
        return Err(
            MetadataError(
                package=package,
                message=f"missing package version for {package} in {manifest}",
                hint=str(manifest),
            )
        )
    return Ok(PackageVersion(package_name=package, version=version))
