"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from reltag.core.errors import ErrorCode
from reltag.output.console import ConsoleProtocol, Style
from reltag.release.errors import ReleaseError, exit_code_for
from reltag.release.model import Failed, Outcome, Skipped, Succeeded


def fail(
    console: ConsoleProtocol,
    message: str,
    *,
    code: ErrorCode,
    hint: str | None = None,
) -> NoReturn:
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(code))


def fail_release(console: ConsoleProtocol, error: ReleaseError) -> NoReturn:
    fail(console, error.message, code=exit_code_for(error), hint=error.hint)


def report_outcome(outcome: Outcome, console: ConsoleProtocol) -> None:
    """Print the outcome; exit non-zero for Failed."""
    match outcome:
        case Skipped():
            console.info(outcome.summary)
        case Succeeded():
            console.success(outcome.summary)
        case Failed(error=error):
            fail_release(console, error)
