"""Deployment lookup by commit SHA."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from coolwatch_core.coolify.client import DEFAULT_TAKE

if TYPE_CHECKING:
    from coolwatch_core.coolify.client import CoolifyClient
    from coolwatch_core.coolify.models import Deployment

logger = logging.getLogger(__name__)


def select_latest(deployments: Iterable[Deployment], commit_sha: str) -> Deployment | None:
    """Return the newest deployment whose commit equals ``commit_sha`` exactly, or None.

    Older deployments of the same commit (re-deploys, superseded attempts) are ignored.
    """
    matching = [d for d in deployments if d.commit == commit_sha]
    if not matching:
        return None
    return max(matching, key=lambda d: d.created_at)


class DeploymentLocator:
    """Finds the deployment of one application that matches a commit.

    Only the newest ``take`` deployments are inspected; a commit that fell out
    of that window is reported as not found.
    """

    def __init__(self, client: CoolifyClient, app_uuid: str, take: int = DEFAULT_TAKE):
        self.client = client
        self.app_uuid = app_uuid
        self.take = take

    def find(self, commit_sha: str) -> Deployment | None:
        deployments = self.client.list_deployments(self.app_uuid, take=self.take)
        found = select_latest(deployments, commit_sha)
        if found is None:
            logger.info("No deployment for commit %s among %d recent deployment(s)", commit_sha[:7], len(deployments))
        else:
            logger.debug("Commit %s maps to deployment %s (%s)", commit_sha[:7], found.id, found.status)
        return found

    def recent(self, limit: int = 5) -> list[Deployment]:
        """Return the newest deployments regardless of commit, for diagnostics."""
        deployments = self.client.list_deployments(self.app_uuid, take=self.take)
        return sorted(deployments, key=lambda d: d.created_at, reverse=True)[:limit]
