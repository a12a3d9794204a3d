from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from reltag.core.config import ReleaseConfig, load_config, load_config_or_default
from reltag.core.errors import ErrorCode
from reltag.core.result import Err
from reltag.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(*, repo_root: Path | None, config_path: Path | None) -> CLIContext:
    try:
        root = (repo_root or Path.cwd()).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --repo-root: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        typer.echo(f"error: --repo-root '{root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if config_path is None:
        config_result = load_config_or_default(root)
    else:
        config_result = load_config(config_path)
    if isinstance(config_result, Err):
        e = config_result.error
        typer.echo(f"error: {e.message}", err=True)
        code = ErrorCode.IO_ERROR if e.kind == "io" else ErrorCode.USER_ERROR
        raise typer.Exit(code=int(code))

    return CLIContext(repo_root=root, config=config_result.value, console=RichConsole())
