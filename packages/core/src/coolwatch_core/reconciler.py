"""Poll-and-reconcile loop for one commit's deployment.

    INITIAL ──terminal──────────────────────────► TERMINAL
       │
       └─non-terminal─► POLLING ──terminal──────► TERMINAL
                          │  ▲
                          └──┘ non-terminal (publish on change)
                          │
                          └──elapsed >= timeout─► TIMED_OUT

A status comment is published once per distinct observed status and once
more when the loop times out, so the last comment always reflects the final
observation. The deployment id seen first is pinned for the whole session:
a poll that returns another deployment (or none) raises TrackingLostError
instead of silently reporting on a different artifact.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol

from rich.console import Console

from coolwatch_core.coolify.client import log_link
from coolwatch_core.errors import TrackingLostError
from coolwatch_core.formatting import format_comment

if TYPE_CHECKING:
    from coolwatch_core.coolify.models import Deployment

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_TIMEOUT = 30 * 60.0


class Locator(Protocol):
    def find(self, commit_sha: str) -> Deployment | None: ...


class Publisher(Protocol):
    def publish(self, body: str): ...


class StatusReporter(Protocol):
    def report(self, deployment: Deployment, log_url: str) -> str: ...


class SessionState(str, enum.Enum):
    INITIAL = "initial"
    POLLING = "polling"
    TERMINAL = "terminal"
    TIMED_OUT = "timed_out"


@dataclass
class ReconciliationSession:
    commit_sha: str
    poll_interval: float
    timeout: float
    start_time: float
    deployment_id: str | None = None
    last_observed_status: str | None = None
    state: SessionState = SessionState.INITIAL
    ticks: int = 0

    def elapsed(self, now: float) -> float:
        return now - self.start_time


@dataclass
class ReconcileResult:
    found: bool
    state: SessionState | None = None
    deployment: Deployment | None = None
    log_link: str | None = None
    ticks: int = 0

    def outputs(self) -> dict[str, str]:
        """Key/value results for the calling pipeline."""
        if not self.found or self.deployment is None:
            return {"found": "false"}
        return {
            "found": "true",
            "status": self.deployment.status,
            "url": self.deployment.url or "",
            "log_link": self.log_link or "",
            "deployment_id": self.deployment.id,
        }


class Reconciler:
    """Drives one ReconciliationSession from first lookup to TERMINAL or TIMED_OUT.

    ``clock`` and ``sleep`` default to ``time.monotonic`` / ``time.sleep`` and
    are injectable so tests can simulate elapsed time.
    """

    def __init__(
        self,
        locator: Locator,
        publisher: Publisher,
        base_url: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        is_production: bool = False,
        status_reporter: StatusReporter | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.locator = locator
        self.publisher = publisher
        self.base_url = base_url
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.is_production = is_production
        self.status_reporter = status_reporter
        self.clock = clock
        self.sleep = sleep

    def run(self, commit_sha: str) -> ReconcileResult:
        session = ReconciliationSession(
            commit_sha=commit_sha,
            poll_interval=self.poll_interval,
            timeout=self.timeout,
            start_time=self.clock(),
        )
        console.print(f"Looking for deployment with commit SHA: [bold]{commit_sha}[/bold]")

        deployment = self.locator.find(commit_sha)
        if deployment is None:
            console.print("[yellow]No deployment found for this commit.[/yellow]")
            return ReconcileResult(found=False)

        session.deployment_id = deployment.id
        console.print(f"Found deployment [bold]{deployment.id}[/bold] with status: {deployment.status}")
        self._observe(session, deployment)

        if deployment.is_terminal:
            session.state = SessionState.TERMINAL
            console.print(f"Deployment already completed with status: [bold]{deployment.status}[/bold]")
        else:
            session.state = SessionState.POLLING
            console.print(
                f"Deployment in progress. Polling every {self.poll_interval:g}s "
                f"(timeout: {self.timeout / 60:g} min)..."
            )
            deployment = self._poll(session, deployment)

        return ReconcileResult(
            found=True,
            state=session.state,
            deployment=deployment,
            log_link=log_link(self.base_url, deployment.id),
            ticks=session.ticks,
        )

    def _poll(self, session: ReconciliationSession, deployment: Deployment) -> Deployment:
        while True:
            if session.elapsed(self.clock()) >= session.timeout:
                session.state = SessionState.TIMED_OUT
                logger.warning(
                    "Timeout after %d poll(s); deployment %s still %s",
                    session.ticks,
                    deployment.id,
                    deployment.status,
                )
                console.print(
                    f"[yellow]Timeout reached ({session.timeout / 60:g} min). "
                    f"Deployment still {deployment.status}.[/yellow]"
                )
                self._emit(deployment)
                return deployment

            logger.debug("Waiting %ss before next check", session.poll_interval)
            self.sleep(session.poll_interval)
            session.ticks += 1

            current = self.locator.find(session.commit_sha)
            if current is None or current.id != session.deployment_id:
                raise TrackingLostError(session.commit_sha, session.deployment_id, current.id if current else None)
            deployment = current
            self._observe(session, deployment)

            if deployment.is_terminal:
                session.state = SessionState.TERMINAL
                console.print(f"Deployment completed with status: [bold]{deployment.status}[/bold]")
                return deployment

    def _observe(self, session: ReconciliationSession, deployment: Deployment) -> None:
        """Record an observation and publish it if the status changed."""
        if deployment.status == session.last_observed_status:
            logger.debug("Deployment %s still %s", deployment.id, deployment.status)
            return
        logger.info(
            "Deployment status changed: %s → %s",
            session.last_observed_status or "initial",
            deployment.status,
        )
        session.last_observed_status = deployment.status
        self._emit(deployment)

    def _emit(self, deployment: Deployment) -> None:
        self.publisher.publish(format_comment(deployment, self.base_url, is_production=self.is_production))
        if self.status_reporter is not None:
            self.status_reporter.report(deployment, log_link(self.base_url, deployment.id))
