from __future__ import annotations

from pathlib import Path

import pytest

from reltag.core.errors import ErrorCode
from reltag.core.result import Err, Ok, Result
from reltag.platform.process import ProcessError
from reltag.release import trigger as trigger_mod
from reltag.release.errors import exit_code_for
from reltag.release.trigger import GhWorkflowTrigger


def _gh_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(trigger_mod.shutil, "which", lambda name: f"/usr/bin/{name}")


def test_command_without_repo(tmp_path: Path) -> None:
    cmd = GhWorkflowTrigger(tmp_path).command("deploy-stage.yaml", "v0.4.1")
    assert cmd == ["gh", "workflow", "run", "deploy-stage.yaml", "--ref", "v0.4.1"]


def test_command_with_repo(tmp_path: Path) -> None:
    cmd = GhWorkflowTrigger(tmp_path, repo="acme/app").command("deploy.yaml", "v1.0.0")
    assert cmd[-2:] == ["--repo", "acme/app"]


def test_trigger_dispatches_once(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _gh_on_path(monkeypatch)
    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str], cwd: Path, *, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        assert cwd == tmp_path
        calls.append(cmd)
        return Ok("")

    monkeypatch.setattr(trigger_mod, "run_process", fake_run)

    result = GhWorkflowTrigger(tmp_path).trigger("deploy-stage.yaml", "v0.4.1")

    assert result == Ok(None)
    assert calls == [["gh", "workflow", "run", "deploy-stage.yaml", "--ref", "v0.4.1"]]


def test_unknown_workflow(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _gh_on_path(monkeypatch)

    def fake_run(
        cmd: list[str], cwd: Path, *, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=1,
                stdout="",
                stderr='could not find any workflows named "nope.yaml"\n',
            )
        )

    monkeypatch.setattr(trigger_mod, "run_process", fake_run)

    result = GhWorkflowTrigger(tmp_path).trigger("nope.yaml", "v0.4.1")

    assert isinstance(result, Err)
    assert result.error.workflow == "nope.yaml"
    assert result.error.ref == "v0.4.1"
    assert result.error.hint == 'could not find any workflows named "nope.yaml"'
    assert exit_code_for(result.error) == ErrorCode.NETWORK_ERROR


def test_gh_missing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(trigger_mod.shutil, "which", lambda name: None)

    def fake_run(
        cmd: list[str], cwd: Path, *, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        raise AssertionError("gh must not run when missing")

    monkeypatch.setattr(trigger_mod, "run_process", fake_run)

    result = GhWorkflowTrigger(tmp_path).trigger("deploy-stage.yaml", "v0.4.1")

    assert isinstance(result, Err)
    assert result.error.tool_missing is True
    assert exit_code_for(result.error) == ErrorCode.ENV_ERROR


def test_preflight_with_gh(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _gh_on_path(monkeypatch)
    assert GhWorkflowTrigger(tmp_path).preflight("deploy-stage.yaml", "v0.4.1") == Ok(None)


def test_preflight_without_gh(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(trigger_mod.shutil, "which", lambda name: None)

    result = GhWorkflowTrigger(tmp_path).preflight("deploy-stage.yaml", "v0.4.1")

    assert isinstance(result, Err)
    assert result.error.tool_missing is True
    assert result.error.message == "gh: missing"
