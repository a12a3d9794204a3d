"""Exit codes for the reltag CLI.

The numeric values are part of the CI contract (workflow steps may branch on
them) and must remain stable:
- 0: Success (released, or nothing to do)
- 1: User error (bad flags, bad event payload, bad config, unreadable metadata)
- 2: Environment error (required tool missing)
- 3: Tag already exists (re-run, or a forgotten version bump)
- 4: Network error (remote query, push or workflow dispatch rejected)
- 5: I/O error (config or event file unreadable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    TAG_EXISTS = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
