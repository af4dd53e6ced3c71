from __future__ import annotations

import logging

import requests

from coolwatch_core.coolify.models import Deployment
from coolwatch_core.errors import RemoteAPIError

logger = logging.getLogger(__name__)

DEFAULT_TAKE = 20


def log_link(base_url: str, deployment_id: str) -> str:
    """Return the Coolify UI page that shows a deployment's build logs."""
    return f"{base_url.rstrip('/')}/deployments/{deployment_id}"


class CoolifyClient:
    """Thin read-only client for the Coolify v1 deployments API."""

    def __init__(self, base_url: str, token: str, session: requests.Session | None = None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def list_deployments(self, app_uuid: str, take: int = DEFAULT_TAKE) -> list[Deployment]:
        """Return the most recent deployments of an application, newest window only.

        Raises RemoteAPIError on transport failure, non-2xx status or an
        undecodable body. Never retries; the reconciler's next tick is the retry.
        """
        url = f"{self.base_url}/api/v1/deployments/applications/{app_uuid}"
        logger.debug("Fetching deployments from %s (take=%d)", url, take)
        try:
            response = self._session.get(url, params={"take": take}, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteAPIError(None, f"{type(e).__name__}: {e}", url=url) from e

        if not response.ok:
            raise RemoteAPIError(response.status_code, response.text, url=url)

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteAPIError(response.status_code, f"Invalid JSON in response: {e}", url=url) from e

        # Current Coolify wraps the list as {"deployments": [...], "count": n}.
        items = data.get("deployments") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise RemoteAPIError(response.status_code, "Response has no deployments list", url=url)

        deployments = [d for d in (Deployment.from_api(item) for item in items if isinstance(item, dict)) if d]
        logger.debug("Received %d deployment(s) for application %s", len(deployments), app_uuid)
        return deployments

    def close(self) -> None:
        self._session.close()
