from __future__ import annotations

from dataclasses import dataclass

from reltag.release.errors import ReleaseError

# Downstream deploy automation matches on this prefix.
TAG_PREFIX = "v"


@dataclass(frozen=True, slots=True)
class MergeEvent:
    """A pull request close notification, as delivered by the event source."""

    merged: bool
    source_branch: str
    target_branch: str
    merge_commit: str


@dataclass(frozen=True, slots=True)
class PackageVersion:
    package_name: str
    version: str


@dataclass(frozen=True, slots=True)
class ReleaseTag:
    name: str
    target_commit: str

    @property
    def short_commit(self) -> str:
        return self.target_commit[:8]


def tag_name_for(version: str) -> str:
    """Derive the release tag name: 1.2.3 -> v1.2.3."""
    return f"{TAG_PREFIX}{version}"


@dataclass(frozen=True, slots=True)
class Skipped:
    """The event was not a release merge; nothing was touched."""

    reason: str

    @property
    def ok(self) -> bool:
        return True

    @property
    def summary(self) -> str:
        return f"skipped: {self.reason}"


@dataclass(frozen=True, slots=True)
class Succeeded:
    tag: ReleaseTag
    workflow: str
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return True

    @property
    def summary(self) -> str:
        prefix = "(dry-run) would release" if self.dry_run else "released"
        return f"{prefix} {self.tag.name} at {self.tag.short_commit} (deploy: {self.workflow})"


@dataclass(frozen=True, slots=True)
class Failed:
    error: ReleaseError

    @property
    def ok(self) -> bool:
        return False

    @property
    def summary(self) -> str:
        return self.error.message


Outcome = Skipped | Succeeded | Failed
