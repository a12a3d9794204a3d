"""Result type for explicit error handling.

Every collaborator of the release pipeline returns a Result instead of
raising, so the orchestration reads as a straight sequence of checks:

    version = reader.read_version(manifest, "ndc-clickhouse-cli")
    if isinstance(version, Err):
        return Failed(version.error)
    tag = tag_name_for(version.value.version)

Pattern matching works too:

    match vcs.exists("v1.2.3"):
        case Ok(True):
            ...
        case Ok(False):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result carrying a value."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result carrying an error payload."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
