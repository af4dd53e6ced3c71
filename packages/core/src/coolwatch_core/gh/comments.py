"""Publishing the deployment status comment.

Pull requests get a single comment, re-identified on every run by its
leading marker and edited in place. Commit comments cannot be edited, so on
push events every publish creates a new comment, and repeated status changes
leave several comments on the commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from github import Github
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from coolwatch_core.errors import CommentChannelUnavailable
from coolwatch_core.formatting import COMMENT_MARKER

if TYPE_CHECKING:
    from coolwatch_core.context import RunContext

console = Console()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentRef:
    id: int
    url: str
    channel: str  # "pull_request" | "commit"
    created: bool


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def find_marked_comment(comments, marker: str = COMMENT_MARKER):
    """Return the first comment whose body starts with the marker, or None."""
    for comment in comments:
        if (comment.body or "").startswith(marker):
            return comment
    return None


class CommentPublisher:
    """Create-or-update of the bot's status comment for one run."""

    def __init__(self, repo, context: RunContext):
        self.repo = repo
        self.context = context

    def publish(self, body: str) -> CommentRef | None:
        """Post ``body`` to the run's comment channel.

        Returns None (after logging a warning) when the event has nowhere to comment.
        """
        try:
            channel = self._channel()
        except CommentChannelUnavailable as e:
            logger.warning("%s Skipping comment.", e)
            console.print(f"[yellow]{e} Skipping comment.[/yellow]")
            return None

        if channel == "pull_request":
            return self._publish_to_pull_request(body)
        return self._publish_to_commit(body)

    def _channel(self) -> str:
        if self.context.issue_number is not None:
            return "pull_request"
        if self.context.event_name == "push":
            return "commit"
        raise CommentChannelUnavailable(
            f"Event {self.context.event_name or '<none>'!r} has no pull request or pushed commit to comment on."
        )

    def _publish_to_pull_request(self, body: str) -> CommentRef:
        issue = self.repo.get_issue(self.context.issue_number)
        existing = find_marked_comment(issue.get_comments())
        if existing is not None:
            if existing.body != body:
                existing.edit(body)
            logger.info("Updated PR comment %s", existing.id)
            return CommentRef(id=existing.id, url=existing.html_url, channel="pull_request", created=False)

        comment = issue.create_comment(body)
        logger.info("Created PR comment %s on #%s", comment.id, self.context.issue_number)
        return CommentRef(id=comment.id, url=comment.html_url, channel="pull_request", created=True)

    def _publish_to_commit(self, body: str) -> CommentRef:
        comment = self.repo.get_commit(self.context.sha).create_comment(body)
        logger.info("Created commit comment %s on %s", comment.id, self.context.sha[:7])
        return CommentRef(id=comment.id, url=comment.html_url, channel="commit", created=True)


class ShadowPublisher:
    """Dry-run publisher: prints each comment body instead of posting it."""

    def __init__(self):
        self.published: list[str] = []

    def publish(self, body: str) -> None:
        self.published.append(body)
        console.print(Panel(Markdown(body), title=f"Shadow comment #{len(self.published)} (not posted)"))
