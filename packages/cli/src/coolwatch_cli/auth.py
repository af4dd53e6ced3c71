"""Where `coolwatch watch` gets the token it posts comments and deployment statuses with.

Inside a workflow the composite action passes its `github_token` input through
as GITHUB_TOKEN (INPUT_GITHUB_TOKEN when the step is wired up by hand). For a
local run against a real repository the gh CLI login is reused, so
`gh auth login` once is enough.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def resolve_github_token() -> str | None:
    """Return the first token found, or None. The watch command turns None into a UsageError."""
    for name in ("GITHUB_TOKEN", "INPUT_GITHUB_TOKEN"):
        token = os.environ.get(name)
        if token:
            return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            gh_token = result.stdout.strip()
            if gh_token:
                logger.debug("Resolved GitHub token via gh CLI session.")
                return gh_token
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass

    return None
