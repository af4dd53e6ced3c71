"""Canonical deployment record and the decode step for Coolify API payloads.

Coolify has returned deployments in more than one shape across versions
(``deployment_uuid`` vs ``uuid``, ``commit`` vs ``git_commit_sha``).
``Deployment.from_api`` is the only place that knows about those variants;
everything past it works with the canonical record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"finished", "failed"})

_ID_KEYS = ("deployment_uuid", "uuid", "id")
_COMMIT_KEYS = ("commit", "git_commit_sha")

# Sort key for records whose created_at is missing or unreadable.
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 timestamp as emitted by Coolify; naive values are taken as UTC."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _first(payload: dict, keys: tuple[str, ...]):
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return value
    return None


def _primary_url(fqdn) -> str | None:
    # Coolify lists every configured domain comma-separated.
    if not fqdn:
        return None
    first = str(fqdn).split(",")[0].strip()
    return first or None


@dataclass(frozen=True)
class Deployment:
    id: str
    commit: str
    status: str
    created_at: datetime
    url: str | None = None
    finished_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_api(cls, payload: dict) -> Deployment | None:
        """Normalise one deployment object from the API, or return None if it is unusable."""
        deployment_id = _first(payload, _ID_KEYS)
        commit = _first(payload, _COMMIT_KEYS)
        if deployment_id is None or commit is None:
            logger.warning("Ignoring deployment record without id or commit: %s", sorted(payload))
            return None
        return cls(
            id=str(deployment_id),
            commit=str(commit),
            status=str(payload.get("status") or "unknown"),
            created_at=parse_timestamp(payload.get("created_at")) or _EPOCH,
            url=_primary_url(payload.get("fqdn")),
            finished_at=parse_timestamp(payload.get("finished_at")),
        )
