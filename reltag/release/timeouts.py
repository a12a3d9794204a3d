from __future__ import annotations

# Local git operations (tag)
GIT_TIMEOUT_SECONDS = 30.0

# Network-bound git operations (ls-remote, push)
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# gh workflow dispatch
GH_TIMEOUT_SECONDS = 60.0

# cargo metadata may resolve the workspace on a cold runner
CARGO_METADATA_TIMEOUT_SECONDS = 5 * 60.0
