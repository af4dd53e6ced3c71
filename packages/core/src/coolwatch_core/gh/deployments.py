"""Mirror the Coolify deployment onto GitHub's Deployments API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from coolwatch_core.formatting import to_github_state

if TYPE_CHECKING:
    from coolwatch_core.context import RunContext
    from coolwatch_core.coolify.models import Deployment

logger = logging.getLogger(__name__)

_DESCRIPTION_LIMIT = 140  # GitHub rejects longer deployment-status descriptions


def find_or_create_deployment(repo, context: RunContext):
    """Return the GitHub deployment for (commit, environment), creating it on first use."""
    for existing in repo.get_deployments(sha=context.sha, environment=context.environment):
        logger.debug("Reusing GitHub deployment %s for %s", existing.id, context.environment)
        return existing

    deployment = repo.create_deployment(
        ref=context.sha,
        environment=context.environment,
        description=f"Coolify deployment ({context.environment})",
        auto_merge=False,
        required_contexts=[],
        transient_environment=not context.is_production,
        production_environment=context.is_production,
    )
    logger.info("Created GitHub deployment %s for %s", deployment.id, context.environment)
    return deployment


class DeploymentStatusReporter:
    """Posts one GitHub deployment status per call, mapping Coolify statuses to GitHub states."""

    def __init__(self, repo, context: RunContext):
        self.repo = repo
        self.context = context
        self._deployment = None

    @property
    def deployment_id(self) -> int | None:
        return self._deployment.id if self._deployment is not None else None

    def report(self, deployment: Deployment, log_url: str) -> str:
        if self._deployment is None:
            self._deployment = find_or_create_deployment(self.repo, self.context)

        state = to_github_state(deployment.status)
        kwargs = {
            "state": state,
            "target_url": log_url,
            "description": f"Coolify deployment {deployment.status}"[:_DESCRIPTION_LIMIT],
        }
        if deployment.url:
            kwargs["environment_url"] = deployment.url

        self._deployment.create_status(**kwargs)
        logger.info("GitHub deployment %s status: %s", self._deployment.id, state)
        return state
