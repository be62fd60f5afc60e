"""tools/github/sticky.py

Sticky pull-request comments.

A sticky comment is identified by a hidden HTML marker built from its header
key; publishing again finds the comment this account wrote with the marker
and rewrites it, so a pull request never accumulates more than one comment
per header.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from memreport.errors import CommentPublishError

from .types import CommentBackend, IssueComment

logger = logging.getLogger(__name__)


def marker(header: str) -> str:
    return f"<!-- Sticky Pull Request Comment{header} -->"


def with_marker(message: str, header: str) -> str:
    return f"{message.rstrip()}\n{marker(header)}"


def strip_marker(body: str, header: str) -> str:
    return body.replace(marker(header), "").rstrip()


def find_sticky_comment(
    backend: CommentBackend,
    pr_number: int,
    header: str,
    *,
    author_login: Optional[str] = None,
) -> Optional[IssueComment]:
    """Return the first comment carrying the header marker.

    With *author_login*, comments written by anyone else are ignored even
    when they quote the marker.
    """

    m = marker(header)
    for c in backend.list_comments(pr_number):
        if m not in c.body:
            continue
        if author_login and c.user_login != author_login:
            continue
        return c
    return None


@dataclass(frozen=True)
class StickyResult:
    action: str  # created|updated|recreated|deleted|unchanged|skipped
    previous_comment_id: Optional[int] = None
    created_comment_id: Optional[int] = None


def publish_sticky_comment(
    backend: CommentBackend,
    pr_number: int,
    *,
    header: str,
    message: str = "",
    append: bool = False,
    recreate: bool = False,
    delete: bool = False,
    only_create: bool = False,
    only_update: bool = False,
    skip_unchanged: bool = False,
    author_login: Optional[str] = None,
) -> StickyResult:
    """Create, update or remove the sticky comment for *header*."""

    if pr_number is None or int(pr_number) <= 0:
        raise CommentPublishError(f"A pull request number is required, got {pr_number!r}")
    if not delete and not message.strip():
        raise CommentPublishError("Refusing to publish an empty sticky comment")
    if only_create and only_update:
        raise CommentPublishError("only_create and only_update are mutually exclusive")

    if author_login is None:
        author_login = backend.author_login()
    prev = find_sticky_comment(backend, pr_number, header, author_login=author_login)
    prev_id = prev.id if prev else None

    if delete:
        if prev is None:
            return StickyResult("skipped")
        backend.delete_comment(prev.id)
        logger.info("deleted sticky comment %s on PR #%s", prev.id, pr_number)
        return StickyResult("deleted", previous_comment_id=prev_id)

    if prev is None:
        if only_update:
            return StickyResult("skipped")
        created = backend.create_comment(pr_number, with_marker(message, header))
        logger.info("created sticky comment %s on PR #%s", created.id, pr_number)
        return StickyResult("created", created_comment_id=created.id)

    if only_create:
        return StickyResult("skipped", previous_comment_id=prev_id)

    if recreate:
        backend.delete_comment(prev.id)
        created = backend.create_comment(pr_number, with_marker(message, header))
        return StickyResult("recreated", previous_comment_id=prev_id, created_comment_id=created.id)

    if append:
        body = with_marker(f"{strip_marker(prev.body, header)}\n{message}", header)
    else:
        body = with_marker(message, header)

    if skip_unchanged and body == prev.body:
        return StickyResult("unchanged", previous_comment_id=prev_id)

    backend.update_comment(prev.id, body)
    logger.info("updated sticky comment %s on PR #%s", prev.id, pr_number)
    return StickyResult("updated", previous_comment_id=prev_id)
