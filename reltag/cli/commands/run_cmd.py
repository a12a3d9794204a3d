from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import typer

from reltag.cli.commands._helpers import fail, report_outcome
from reltag.cli.context import CLIContext, build_context
from reltag.core.config import MetadataSource
from reltag.core.errors import ErrorCode
from reltag.core.result import Err
from reltag.output.console import Style
from reltag.release.event import load_event_file
from reltag.release.gate import gate_from_config
from reltag.release.model import MergeEvent


def run(
    event: Path | None = typer.Option(
        None,
        "--event",
        envvar="GITHUB_EVENT_PATH",
        help="pull_request event JSON (defaults to $GITHUB_EVENT_PATH)",
    ),
    source: str | None = typer.Option(None, "--source", help="Source branch (instead of --event)"),
    target: str | None = typer.Option(None, "--target", help="Target branch (instead of --event)"),
    commit: str | None = typer.Option(None, "--commit", help="Merge commit SHA"),
    merged: bool = typer.Option(True, "--merged/--not-merged", help="Merge flag for --source"),
    repo_root: Path | None = typer.Option(None, "--repo-root", help="Repository checkout"),
    config: Path | None = typer.Option(None, "--config", help="Config file (default reltag.toml)"),
    package: str | None = typer.Option(None, "--package", help="Cargo package holding the version"),
    manifest: str | None = typer.Option(None, "--manifest", help="Cargo.toml path"),
    metadata: MetadataSource | None = typer.Option(
        None, "--metadata", help="cargo (cargo metadata) or manifest (parse Cargo.toml)"
    ),
    workflow: str | None = typer.Option(None, "--workflow", help="Deployment workflow file"),
    remote: str | None = typer.Option(None, "--remote", help="Git remote for tags"),
    repo: str | None = typer.Option(None, "--repo", help="owner/name for gh"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Check only; do not push or dispatch"),
) -> None:
    """Tag a merged release branch and start its deployment."""
    ctx = build_context(repo_root=repo_root, config_path=config)
    cfg = ctx.config.with_overrides(
        package=package,
        manifest=manifest,
        metadata=metadata,
        workflow=workflow,
        remote=remote,
        repo=repo,
    )

    merge_event = _resolve_event(
        ctx, event=event, source=source, target=target, commit=commit, merged=merged
    )
    ctx.console.print(
        f"merge: {merge_event.source_branch} -> {merge_event.target_branch} "
        f"(merged={str(merge_event.merged).lower()})",
        Style.DIM,
    )

    gate = gate_from_config(cfg, repo_root=ctx.repo_root, console=ctx.console, dry_run=dry_run)
    report_outcome(gate.evaluate(merge_event), ctx.console)


def _resolve_event(
    ctx: CLIContext,
    *,
    event: Path | None,
    source: str | None,
    target: str | None,
    commit: str | None,
    merged: bool,
) -> MergeEvent:
    if source is not None or target is not None:
        if source is None or target is None:
            fail(
                ctx.console,
                "--source and --target must be given together",
                code=ErrorCode.USER_ERROR,
            )
        return MergeEvent(
            merged=merged,
            source_branch=source,
            target_branch=target,
            merge_commit=commit or "",
        )

    if event is None:
        fail(
            ctx.console,
            "no merge event",
            code=ErrorCode.USER_ERROR,
            hint="pass --event, set GITHUB_EVENT_PATH, or use --source/--target",
        )

    loaded = load_event_file(event)
    if isinstance(loaded, Err):
        e = loaded.error
        fail(
            ctx.console,
            e.message,
            code=ErrorCode.IO_ERROR if e.io else ErrorCode.USER_ERROR,
            hint=str(e.path) if e.path else None,
        )

    if commit is not None:
        return replace(loaded.value, merge_commit=commit)
    return loaded.value
