from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol

from reltag.core.result import Err, Ok, Result
from reltag.platform.process import run as run_process
from reltag.release.errors import TriggerError
from reltag.release.timeouts import GH_TIMEOUT_SECONDS


class WorkflowTrigger(Protocol):
    def preflight(self, workflow: str, ref: str) -> Result[None, TriggerError]:
        """Check that dispatching can work at all, before anything is published."""
        ...

    def trigger(self, workflow: str, ref: str) -> Result[None, TriggerError]:
        """Ask the automation host to run `workflow` against `ref`. Does not wait."""
        ...


class GhWorkflowTrigger:
    """Dispatches workflows with `gh workflow run`.

    gh reads its token from GH_TOKEN, so the calling job needs
    `actions: write` permission.
    """

    def __init__(self, repo_root: Path, *, repo: str | None = None) -> None:
        self.repo_root = repo_root
        self.repo = repo

    def command(self, workflow: str, ref: str) -> list[str]:
        cmd = ["gh", "workflow", "run", workflow, "--ref", ref]
        if self.repo is not None:
            cmd.extend(["--repo", self.repo])
        return cmd

    def preflight(self, workflow: str, ref: str) -> Result[None, TriggerError]:
        if shutil.which("gh") is None:
            return Err(
                TriggerError(
                    workflow=workflow,
                    ref=ref,
                    message="gh: missing",
                    hint="Install GitHub CLI: https://cli.github.com/",
                    tool_missing=True,
                )
            )
        return Ok(None)

    def trigger(self, workflow: str, ref: str) -> Result[None, TriggerError]:
        ready = self.preflight(workflow, ref)
        if isinstance(ready, Err):
            return ready

        result = run_process(
            self.command(workflow, ref), cwd=self.repo_root, timeout=GH_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return Err(
                TriggerError(
                    workflow=workflow,
                    ref=ref,
                    message=f"failed to dispatch workflow {workflow} for {ref}",
                    hint=result.error.detail(),
                )
            )
        return Ok(None)
