"""GitHub pull_request event parsing.

The tag job runs on `pull_request: closed`; Actions writes the event payload
to the file named by GITHUB_EVENT_PATH. Only four fields matter:

    pull_request.merged            -> MergeEvent.merged
    pull_request.head.ref          -> MergeEvent.source_branch
    pull_request.base.ref          -> MergeEvent.target_branch
    pull_request.merge_commit_sha  -> MergeEvent.merge_commit
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from reltag.core.result import Err, Ok, Result
from reltag.core.structured import as_str_dict, get_bool, get_exact_str, get_str, get_table
from reltag.release.model import MergeEvent


@dataclass(frozen=True, slots=True)
class EventError:
    message: str
    path: Path | None = None
    # True when the file could not be read at all (vs. read but malformed).
    io: bool = False


def parse_pull_request_event(payload: object) -> Result[MergeEvent, EventError]:
    data = as_str_dict(payload)
    if data is None:
        return Err(EventError("event payload must be a JSON object"))

    pr = get_table(data, "pull_request")
    if pr is None:
        return Err(EventError("event payload has no pull_request (is this a pull_request event?)"))

    merged = get_bool(pr, "merged")
    if merged is None:
        return Err(EventError("pull_request.merged is missing or not a boolean"))

    head = get_table(pr, "head") or {}
    base = get_table(pr, "base") or {}
    # Refs are compared exactly as GitHub delivered them.
    source = get_exact_str(head, "ref")
    target = get_exact_str(base, "ref")
    if source is None or target is None:
        return Err(EventError("pull_request.head.ref and pull_request.base.ref are required"))

    # Unmerged PRs have no merge commit; the gate skips them before it matters.
    merge_commit = get_str(pr, "merge_commit_sha") or ""

    return Ok(
        MergeEvent(
            merged=merged,
            source_branch=source,
            target_branch=target,
            merge_commit=merge_commit,
        )
    )


def load_event_file(path: Path) -> Result[MergeEvent, EventError]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(EventError(f"failed to read event file: {e}", path=path, io=True))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(EventError(f"invalid JSON in event file: {e}", path=path))

    result = parse_pull_request_event(obj)
    if isinstance(result, Err):
        return Err(EventError(result.error.message, path=path))
    return result
