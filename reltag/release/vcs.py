"""Git adapter for the tag namespace of the shared remote.

The existence check asks the remote (`git ls-remote`) rather than the local
checkout: CI checkouts are shallow and usually carry no tags. Publishing
never forces and only counts a push that created the ref: when two runs race
for the same tag, the loser is either rejected (different object) or told the
ref is already up to date (same commit), and both are write errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from reltag.core.result import Err, Ok, Result
from reltag.platform.process import ProcessError
from reltag.platform.process import run as run_process
from reltag.release.errors import VcsQueryError, VcsWriteError
from reltag.release.timeouts import GIT_NETWORK_TIMEOUT_SECONDS, GIT_TIMEOUT_SECONDS

_NETWORK_COMMANDS = frozenset({"ls-remote", "push"})


class VersionControlClient(Protocol):
    def exists(self, tag: str) -> Result[bool, VcsQueryError]:
        """True if the remote has a ref named exactly refs/tags/<tag>."""
        ...

    def publish(self, tag: str, target_commit: str) -> Result[None, VcsWriteError]:
        """Create <tag> at <target_commit> and push it. Does not re-check existence."""
        ...


def remote_has_tag(ls_remote_output: str, tag: str) -> bool:
    """Return True if `git ls-remote` output lists exactly refs/tags/<tag>.

    Annotated tags also show up peeled (`refs/tags/<tag>^{}`); both forms
    name the same tag.
    """
    wanted = f"refs/tags/{tag}"
    for line in ls_remote_output.splitlines():
        parts = line.split()
        if len(parts) != 2:
            continue
        ref = parts[1].removesuffix("^{}")
        if ref == wanted:
            return True
    return False


def push_status(porcelain_output: str, tag: str) -> str | None:
    """Return the `git push --porcelain` status flag for refs/tags/<tag>.

    `*` means the remote created the ref, `=` that it already held the same
    object (only listed with --verbose), `!` that it was rejected. None if the
    ref is not reported.
    """
    ref = f"refs/tags/{tag}"
    for line in porcelain_output.splitlines():
        parts = line.split("\t")
        if len(parts) < 2 or len(parts[0]) != 1:
            continue
        if parts[1].split(":")[-1] == ref:
            return parts[0]
    return None


class GitClient:
    """Tag operations for one repository checkout.

    Attributes:
        repo_root: Working directory for git commands
        remote: Name of the shared remote
        tag_message: Message for annotated tags; None creates lightweight tags
    """

    def __init__(self, repo_root: Path, *, remote: str = "origin", tag_message: str | None = None):
        self.repo_root = repo_root
        self.remote = remote
        self.tag_message = tag_message

    def exists(self, tag: str) -> Result[bool, VcsQueryError]:
        result = self._run(["ls-remote", "--tags", self.remote, f"refs/tags/{tag}"])
        match result:
            case Err(e):
                return Err(
                    VcsQueryError(
                        tag=tag,
                        message=f"could not query tags on remote '{self.remote}' for {tag}",
                        hint=e.detail(),
                    )
                )
            case Ok(stdout):
                return Ok(remote_has_tag(stdout, tag))

    def publish(self, tag: str, target_commit: str) -> Result[None, VcsWriteError]:
        if self.tag_message is None:
            create = ["tag", tag, target_commit]
        else:
            create = ["tag", "-a", "-m", self.tag_message, tag, target_commit]

        created = self._run(create)
        if isinstance(created, Err):
            return Err(
                VcsWriteError(
                    tag=tag,
                    message=f"failed to create tag {tag} at {target_commit}",
                    hint=created.error.detail(),
                )
            )

        ref = f"refs/tags/{tag}"
        pushed = self._run(["push", "--porcelain", "--verbose", self.remote, f"{ref}:{ref}"])
        if isinstance(pushed, Err):
            return Err(
                VcsWriteError(
                    tag=tag,
                    message=f"remote '{self.remote}' rejected tag {tag}",
                    hint=pushed.error.detail(),
                )
            )

        status = push_status(pushed.value, tag)
        if status == "=":
            return Err(
                VcsWriteError(
                    tag=tag,
                    message=f"tag {tag} was already on remote '{self.remote}' before this push",
                    hint="another run published it first",
                )
            )
        if status != "*":
            return Err(
                VcsWriteError(
                    tag=tag,
                    message=f"remote '{self.remote}' did not report creating tag {tag}",
                    hint=pushed.value.strip() or None,
                )
            )
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else GIT_TIMEOUT_SECONDS
        )
        return run_process(
            ["git", "-C", str(self.repo_root), *args], cwd=self.repo_root, timeout=timeout
        )
