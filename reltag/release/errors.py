"""Failure taxonomy of a release run.

Errors are values: adapters return them inside Err(...) and the gate wraps
the first one it sees into Failed(...). Each carries enough context (package,
tag, workflow) to diagnose the run from the CI log alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from reltag.core.errors import ErrorCode


def _pretty(message: str, hint: str | None) -> str:
    if hint:
        return f"{message} (hint: {hint})"
    return message


@dataclass(frozen=True, slots=True)
class MetadataError:
    """The package version could not be determined."""

    kind: ClassVar[str] = "metadata_error"

    package: str
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        return _pretty(self.message, self.hint)


@dataclass(frozen=True, slots=True)
class VcsQueryError:
    """The tag existence check could not be completed."""

    kind: ClassVar[str] = "vcs_query_error"

    tag: str
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        return _pretty(self.message, self.hint)


@dataclass(frozen=True, slots=True)
class TagAlreadyExists:
    kind: ClassVar[str] = "tag_exists"

    tag: str

    @property
    def message(self) -> str:
        return f"tag '{self.tag}' already exists"

    @property
    def hint(self) -> str:
        return "bump the package version before merging the next release branch"

    def pretty(self) -> str:
        return _pretty(self.message, self.hint)


@dataclass(frozen=True, slots=True)
class VcsWriteError:
    """Tag creation or push was rejected (includes losing a tag race)."""

    kind: ClassVar[str] = "vcs_write_error"

    tag: str
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        return _pretty(self.message, self.hint)


@dataclass(frozen=True, slots=True)
class TriggerError:
    """The deployment workflow dispatch was rejected."""

    kind: ClassVar[str] = "trigger_error"

    workflow: str
    ref: str
    message: str
    hint: str | None = None
    tool_missing: bool = False

    def pretty(self) -> str:
        return _pretty(self.message, self.hint)


ReleaseError = MetadataError | VcsQueryError | TagAlreadyExists | VcsWriteError | TriggerError


def exit_code_for(error: ReleaseError) -> ErrorCode:
    """Map a release error to the CLI exit code."""
    match error:
        case MetadataError():
            return ErrorCode.USER_ERROR
        case TagAlreadyExists():
            return ErrorCode.TAG_EXISTS
        case TriggerError(tool_missing=True):
            return ErrorCode.ENV_ERROR
        case VcsQueryError() | VcsWriteError() | TriggerError():
            return ErrorCode.NETWORK_ERROR
    raise AssertionError(f"unexpected release error: {error!r}")
