from __future__ import annotations

import json
from pathlib import Path

from reltag.core.config import GatePolicy
from reltag.core.result import Err, Ok
from reltag.release.event import load_event_file, parse_pull_request_event
from reltag.release.gate import qualifies
from reltag.release.model import MergeEvent

SHA = "3f1c2a9e8b7d6c5f4e3d2c1b0a9f8e7d6c5b4a39"


def _payload(
    *, merged: bool = True, head: str = "release-0.4.1", base: str = "main"
) -> dict[str, object]:
    return {
        "action": "closed",
        "number": 42,
        "pull_request": {
            "merged": merged,
            "merge_commit_sha": SHA if merged else None,
            "head": {"ref": head, "sha": "a" * 40},
            "base": {"ref": base, "sha": "b" * 40},
        },
    }


def test_parse_merged_release_pr() -> None:
    result = parse_pull_request_event(_payload())
    assert result == Ok(
        MergeEvent(
            merged=True,
            source_branch="release-0.4.1",
            target_branch="main",
            merge_commit=SHA,
        )
    )


def test_parse_closed_unmerged_pr_has_no_commit() -> None:
    result = parse_pull_request_event(_payload(merged=False))
    assert isinstance(result, Ok)
    assert result.value.merged is False
    assert result.value.merge_commit == ""


def test_parse_rejects_non_pull_request_event() -> None:
    result = parse_pull_request_event({"ref": "refs/heads/main", "commits": []})
    assert isinstance(result, Err)
    assert "pull_request" in result.error.message


def test_parse_rejects_non_object() -> None:
    assert isinstance(parse_pull_request_event(["not", "an", "object"]), Err)


def test_parse_requires_merged_flag() -> None:
    payload = _payload()
    pr = payload["pull_request"]
    assert isinstance(pr, dict)
    del pr["merged"]
    result = parse_pull_request_event(payload)
    assert isinstance(result, Err)
    assert "merged" in result.error.message


def test_parse_requires_branch_refs() -> None:
    payload = _payload()
    pr = payload["pull_request"]
    assert isinstance(pr, dict)
    pr["base"] = {}
    assert isinstance(parse_pull_request_event(payload), Err)


def test_parse_keeps_refs_verbatim() -> None:
    result = parse_pull_request_event(_payload(head=" release-0.4.1", base="main\n"))

    assert isinstance(result, Ok)
    assert result.value.source_branch == " release-0.4.1"
    assert result.value.target_branch == "main\n"
    assert qualifies(result.value, policy=GatePolicy()) is not None


def test_load_event_file(tmp_path: Path) -> None:
    path = tmp_path / "event.json"
    path.write_text(json.dumps(_payload(head="release-2.0.0")), encoding="utf-8")

    result = load_event_file(path)

    assert isinstance(result, Ok)
    assert result.value.source_branch == "release-2.0.0"


def test_load_event_file_missing(tmp_path: Path) -> None:
    result = load_event_file(tmp_path / "missing.json")
    assert isinstance(result, Err)
    assert result.error.io is True


def test_load_event_file_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "event.json"
    path.write_text("{not json", encoding="utf-8")

    result = load_event_file(path)

    assert isinstance(result, Err)
    assert result.error.io is False
    assert result.error.path == path
