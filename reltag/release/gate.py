"""Release gate: decides whether a merge is a release and runs the pipeline.

The pipeline is strictly linear:

    read version -> derive tag -> check remote -> check gh -> push tag -> dispatch deploy

The first failing step ends the run. Nothing is retried and nothing already
done is undone: a dispatch failure after the push leaves a published tag with
no deployment, and the Failed outcome says so.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TypeAlias

from reltag.core.config import GatePolicy, ReleaseConfig
from reltag.core.result import Err, Ok, Result
from reltag.output.console import ConsoleProtocol, Style
from reltag.release.errors import MetadataError, TagAlreadyExists, VcsQueryError, VcsWriteError
from reltag.release.metadata import CargoManifestReader, CargoMetadataReader, MetadataReader
from reltag.release.model import (
    Failed,
    MergeEvent,
    Outcome,
    ReleaseTag,
    Skipped,
    Succeeded,
    tag_name_for,
)
from reltag.release.trigger import GhWorkflowTrigger, WorkflowTrigger
from reltag.release.vcs import GitClient, VersionControlClient

PlanError: TypeAlias = MetadataError | VcsQueryError | TagAlreadyExists


def qualifies(event: MergeEvent, *, policy: GatePolicy) -> str | None:
    """Return None for a release merge, otherwise why the event is skipped."""
    if not event.merged:
        return "pull request was closed without merging"
    if not event.source_branch.startswith(policy.release_prefix):
        return (
            f"source branch '{event.source_branch}' does not start with "
            f"'{policy.release_prefix}'"
        )
    if event.target_branch != policy.main_branch:
        return f"target branch '{event.target_branch}' is not '{policy.main_branch}'"
    return None


@dataclass(frozen=True, slots=True)
class ReleaseGate:
    metadata: MetadataReader
    vcs: VersionControlClient
    trigger: WorkflowTrigger
    console: ConsoleProtocol
    manifest: Path
    package: str
    workflow: str
    policy: GatePolicy = field(default_factory=GatePolicy)
    # Reads still run; tag push and dispatch are only echoed.
    dry_run: bool = False

    def plan(self, merge_commit: str = "") -> Result[ReleaseTag, PlanError]:
        """Read the version and check that its tag is still free on the remote.

        Shared by `evaluate` and the pre-merge `check` command. Read-only.
        """
        version = self.metadata.read_version(self.manifest, self.package)
        if isinstance(version, Err):
            return version

        tag = ReleaseTag(
            name=tag_name_for(version.value.version),
            target_commit=merge_commit,
        )
        self.console.print(
            f"{self.package} {version.value.version} -> {tag.name}", Style.DIM
        )

        exists = self.vcs.exists(tag.name)
        if isinstance(exists, Err):
            return exists
        if exists.value:
            return Err(TagAlreadyExists(tag=tag.name))
        return Ok(tag)

    def evaluate(self, event: MergeEvent) -> Outcome:
        reason = qualifies(event, policy=self.policy)
        if reason is not None:
            return Skipped(reason)

        planned = self.plan(event.merge_commit)
        if isinstance(planned, Err):
            return Failed(planned.error)
        tag = planned.value

        if not tag.target_commit:
            return Failed(
                VcsWriteError(
                    tag=tag.name,
                    message=f"merge event carries no merge commit to tag as {tag.name}",
                )
            )

        # gh must be usable before the tag is published.
        ready = self.trigger.preflight(self.workflow, tag.name)
        if isinstance(ready, Err):
            return Failed(ready.error)

        if self.dry_run:
            self.console.print(f"(dry-run) would tag {tag.name} at {tag.target_commit}", Style.DIM)
            self.console.print(f"(dry-run) would run {self.workflow} --ref {tag.name}", Style.DIM)
            return Succeeded(tag=tag, workflow=self.workflow, dry_run=True)

        self.console.info(f"Tagging {tag.name} at {tag.short_commit}")
        published = self.vcs.publish(tag.name, tag.target_commit)
        if isinstance(published, Err):
            return Failed(published.error)

        self.console.info(f"Running {self.workflow} for {tag.name}")
        triggered = self.trigger.trigger(self.workflow, tag.name)
        if isinstance(triggered, Err):
            e = triggered.error
            return Failed(
                replace(
                    e,
                    message=f"{e.message}; tag {tag.name} is already pushed, no deployment started",
                )
            )

        return Succeeded(tag=tag, workflow=self.workflow)


def gate_from_config(
    config: ReleaseConfig,
    *,
    repo_root: Path,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> ReleaseGate:
    """Wire the cargo/git/gh adapters for one run."""
    metadata: MetadataReader
    if config.metadata == "cargo":
        metadata = CargoMetadataReader()
    else:
        metadata = CargoManifestReader()

    return ReleaseGate(
        metadata=metadata,
        vcs=GitClient(repo_root, remote=config.remote, tag_message=config.tag_message),
        trigger=GhWorkflowTrigger(repo_root, repo=config.repo),
        console=console,
        manifest=config.manifest_path(repo_root),
        package=config.package,
        workflow=config.workflow,
        policy=config.gate,
        dry_run=dry_run,
    )
