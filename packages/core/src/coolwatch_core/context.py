"""Explicit run context.

Holds everything that GitHub Actions exposes implicitly (repository, commit,
event) so the locator, reconciler and publishers receive it as a value and
can be exercised with synthetic contexts in tests.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunContext:
    repo: str  # owner/name
    sha: str
    event_name: str = ""
    ref: str = ""
    issue_number: int | None = None
    is_production: bool = False
    environment: str = "preview"

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        production: bool | None = None,
        environment: str | None = None,
        **overrides,
    ) -> RunContext:
        """Build a context from the GitHub Actions environment.

        ``overrides`` (repo, sha, event_name, ref, issue_number) win over the
        environment when not None; local runs supply their commit this way.
        For pull-request events the commit is the PR head, since that is what
        the deployment platform builds; GITHUB_SHA is the synthetic merge commit.
        """
        env = os.environ if environ is None else environ
        event_name = env.get("GITHUB_EVENT_NAME", "")
        event = _read_event(env.get("GITHUB_EVENT_PATH"))

        sha = env.get("GITHUB_SHA", "")
        issue_number = None
        pull_request = event.get("pull_request")
        if isinstance(pull_request, dict):
            issue_number = pull_request.get("number")
            sha = (pull_request.get("head") or {}).get("sha") or sha
        elif isinstance(event.get("issue"), dict):
            issue_number = event["issue"].get("number")

        ctx = cls(
            repo=env.get("GITHUB_REPOSITORY", ""),
            sha=sha,
            event_name=event_name,
            ref=env.get("GITHUB_REF", ""),
            issue_number=issue_number,
        )
        ctx = replace(ctx, **{k: v for k, v in overrides.items() if v is not None})
        return ctx.with_environment(production, environment)

    def with_environment(self, production: bool | None = None, environment: str | None = None) -> RunContext:
        """Resolve production/preview: explicit values first, else push events are production."""
        is_production = production if production is not None else self.event_name == "push"
        name = environment or ("production" if is_production else "preview")
        return replace(self, is_production=is_production, environment=name)


def _read_event(path: str | None) -> dict:
    if not path:
        return {}
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read GitHub event payload %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}
