"""pipeline.events

The event that triggered a workflow run.

A run is always evaluated against exactly one :class:`EventContext`. On a CI
machine it is read from the ``GITHUB_*`` environment; locally it is built from
CLI flags. Triggers and step conditions only ever look at this object.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})

_BRANCH_PREFIX = "refs/heads/"


def _pr_number_from_payload(payload: Mapping[str, Any]) -> Optional[int]:
    pr = payload.get("pull_request")
    if isinstance(pr, dict) and pr.get("number") is not None:
        return int(pr["number"])
    if payload.get("number") is not None:
        return int(payload["number"])
    return None


def _load_payload(event_path: Optional[str]) -> dict[str, Any]:
    if not event_path:
        return {}
    p = Path(event_path)
    if not p.is_file():
        logger.warning("GITHUB_EVENT_PATH points to a missing file: %s", p)
        return {}
    data = json.loads(p.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


@dataclass(frozen=True)
class EventContext:
    """Immutable description of the triggering event.

    Attributes
    ----------
    event_name:
        ``push``, ``pull_request``, ``pull_request_target``, ``merge_group``,
        ``workflow_dispatch``...
    ref:
        Full git ref, e.g. ``refs/heads/master`` or ``refs/pull/12/merge``.
    repository:
        ``owner/name``. Needed only to publish comments.
    pr_number:
        Pull request number for pull-request events.
    """

    event_name: str
    ref: str = ""
    sha: str = ""
    repository: Optional[str] = None
    pr_number: Optional[int] = None
    payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def branch(self) -> Optional[str]:
        if self.ref.startswith(_BRANCH_PREFIX):
            return self.ref[len(_BRANCH_PREFIX):]
        return None

    @property
    def is_pull_request(self) -> bool:
        return self.event_name in PULL_REQUEST_EVENTS

    @staticmethod
    def local(
        event_name: str = "push",
        *,
        branch: Optional[str] = None,
        ref: Optional[str] = None,
        sha: str = "",
        repository: Optional[str] = None,
        pr_number: Optional[int] = None,
    ) -> "EventContext":
        """Build an event from explicit values (CLI flags, tests)."""

        if ref is None:
            if event_name in PULL_REQUEST_EVENTS and pr_number is not None:
                ref = f"refs/pull/{pr_number}/merge"
            elif branch:
                ref = f"{_BRANCH_PREFIX}{branch}"
            else:
                ref = ""
        return EventContext(
            event_name=str(event_name),
            ref=ref,
            sha=sha,
            repository=repository,
            pr_number=pr_number,
        )

    @staticmethod
    def from_env(environ: Mapping[str, str]) -> "EventContext":
        """Read the event the way a GitHub Actions job sees it."""

        event_name = environ.get("GITHUB_EVENT_NAME")
        if not event_name:
            raise ValueError("GITHUB_EVENT_NAME is not set; pass --event instead.")

        payload = _load_payload(environ.get("GITHUB_EVENT_PATH"))
        pr_number = _pr_number_from_payload(payload) if event_name in PULL_REQUEST_EVENTS else None

        return EventContext(
            event_name=event_name,
            ref=environ.get("GITHUB_REF", ""),
            sha=environ.get("GITHUB_SHA", ""),
            repository=environ.get("GITHUB_REPOSITORY") or None,
            pr_number=pr_number,
            payload=payload,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "event_name": self.event_name,
            "ref": self.ref,
            "sha": self.sha,
            "repository": self.repository,
            "pr_number": self.pr_number,
        }
