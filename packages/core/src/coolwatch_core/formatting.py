"""Comment body formatting and status mapping.

Everything here is pure: identical inputs always give identical output, which
is what makes re-publishing the PR comment idempotent.
"""

from __future__ import annotations

from datetime import timezone
from typing import TYPE_CHECKING

from coolwatch_core.coolify.client import log_link

if TYPE_CHECKING:
    from coolwatch_core.coolify.models import Deployment

COMMENT_MARKER = "🚀 **Coolify deployment**"

_STATUS_SYMBOLS = {
    "finished": "✅",
    "failed": "❌",
    "in_progress": "🔄",
}
_DEFAULT_SYMBOL = "⏳"

_GITHUB_STATES = {
    "finished": "success",
    "failed": "failure",
    "in_progress": "in_progress",
    "queued": "queued",
}
_DEFAULT_GITHUB_STATE = "pending"


def status_symbol(status: str) -> str:
    return _STATUS_SYMBOLS.get(status, _DEFAULT_SYMBOL)


def to_github_state(status: str) -> str:
    """Map a Coolify status to a GitHub deployment-status state. Unknown values map to pending."""
    return _GITHUB_STATES.get(status, _DEFAULT_GITHUB_STATE)


def format_comment(deployment: Deployment, base_url: str, is_production: bool = False) -> str:
    """Build the markdown body of the status comment for a deployment."""
    logs = log_link(base_url, deployment.id)

    lines = [
        COMMENT_MARKER,
        "",
        f"{status_symbol(deployment.status)} **Status:** {deployment.status}",
    ]

    # The reachable URL is only advertised once the deployment actually succeeded.
    if deployment.status == "finished" and deployment.url:
        label = "🌐 **Production URL**" if is_production else "🔗 **Preview URL**"
        lines.append("")
        lines.append(f"{label}: [{deployment.url}]({deployment.url})")

    if deployment.finished_at is not None:
        finished = deployment.finished_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        lines.append("")
        lines.append(f"🕒 **Finished:** {finished}")

    lines.append("")
    lines.append(f"📋 [View Build Logs]({logs})")

    if deployment.status == "failed":
        lines.append("")
        lines.append("---")
        lines.append("")
        lines.append("### 🔄 Retry Deployment")
        lines.append("")
        lines.append(f"[🔄 Retry Deployment]({logs}) | [📋 View Logs]({logs})")

    return "\n".join(lines)
