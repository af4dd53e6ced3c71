"""Error types raised by coolwatch_core.

Fatal errors (RemoteAPIError, TrackingLostError) abort the run; the CLI turns
them into a non-zero exit. CommentChannelUnavailable is non-fatal: the
publisher logs it and skips the comment.
"""

from __future__ import annotations


class CoolwatchError(Exception):
    """Base class for all coolwatch errors."""


class RemoteAPIError(CoolwatchError):
    """The deployment platform could not be reached or answered with a non-2xx status.

    ``status`` is None for transport failures (DNS, connection reset, timeout).
    """

    def __init__(self, status: int | None, body: str, url: str | None = None):
        self.status = status
        self.body = body
        self.url = url
        if status is None:
            message = f"Coolify API request failed: {body}"
        else:
            message = f"Coolify API error: {status}\n{body}".rstrip()
        super().__init__(message)


class TrackingLostError(CoolwatchError):
    """A poll returned a different deployment (or none) for the commit being tracked."""

    def __init__(self, commit_sha: str, expected_id: str, actual_id: str | None):
        self.commit_sha = commit_sha
        self.expected_id = expected_id
        self.actual_id = actual_id
        if actual_id is None:
            detail = "no deployment was returned"
        else:
            detail = f"deployment {actual_id} was returned instead"
        super().__init__(f"Lost track of deployment {expected_id} for commit {commit_sha[:7]}: {detail}.")


class CommentChannelUnavailable(CoolwatchError):
    """The triggering event has no pull request or push commit to comment on."""
