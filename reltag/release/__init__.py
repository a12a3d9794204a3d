"""Release bounded context.

- model: merge events, versions, tags and run outcomes
- errors: the failure taxonomy of a release run
- metadata / vcs / trigger: adapters for cargo, git and gh
- event: GitHub pull_request payload parsing
- gate: qualification and the release pipeline
"""

from __future__ import annotations
