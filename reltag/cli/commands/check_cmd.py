from __future__ import annotations

from pathlib import Path

import typer

from reltag.cli.commands._helpers import fail_release
from reltag.cli.context import build_context
from reltag.core.config import MetadataSource
from reltag.core.result import Err
from reltag.release.gate import gate_from_config


def check(
    repo_root: Path | None = typer.Option(None, "--repo-root", help="Repository checkout"),
    config: Path | None = typer.Option(None, "--config", help="Config file (default reltag.toml)"),
    package: str | None = typer.Option(None, "--package", help="Cargo package holding the version"),
    manifest: str | None = typer.Option(None, "--manifest", help="Cargo.toml path"),
    metadata: MetadataSource | None = typer.Option(
        None, "--metadata", help="cargo (cargo metadata) or manifest (parse Cargo.toml)"
    ),
    remote: str | None = typer.Option(None, "--remote", help="Git remote for tags"),
) -> None:
    """Show the tag the next release merge would create, and whether it is free."""
    ctx = build_context(repo_root=repo_root, config_path=config)
    cfg = ctx.config.with_overrides(
        package=package,
        manifest=manifest,
        metadata=metadata,
        remote=remote,
    )
    gate = gate_from_config(cfg, repo_root=ctx.repo_root, console=ctx.console)

    planned = gate.plan()
    if isinstance(planned, Err):
        fail_release(ctx.console, planned.error)

    ctx.console.success(f"{planned.value.name} is free on {cfg.remote}")
