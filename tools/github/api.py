"""tools/github/api.py

All GitHub REST calls live here.

Design goals:
  - Keep network I/O separated from the sticky-comment logic.
  - Fail loudly: any non-2xx response raises CommentPublishError. Publishing
    is the last step of the report job, so there is nothing to degrade to.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from memreport.errors import CommentPublishError

from .types import GitHubConfig, IssueComment

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
TIMEOUT_SECONDS = 30

# The workflow GITHUB_TOKEN cannot call GET /user; its comments are written by this app user.
ACTIONS_BOT_LOGIN = "github-actions[bot]"


def _comment_from_json(data: Dict[str, Any]) -> IssueComment:
    user = data.get("user") or {}
    return IssueComment(
        id=int(data["id"]),
        body=str(data.get("body") or ""),
        user_login=user.get("login") if isinstance(user, dict) else None,
    )


class GitHubClient:
    """Issue-comment endpoints of the GitHub REST API (pull requests are issues)."""

    def __init__(self, cfg: GitHubConfig, *, session: Optional[requests.Session] = None) -> None:
        self.cfg = cfg
        self.session = session or requests.Session()
        self._login: Optional[str] = None
        self.session.headers.update(
            {
                "Authorization": f"Bearer {cfg.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    def _repo_url(self, suffix: str) -> str:
        owner, name = self.cfg.owner_repo
        return f"{self.cfg.api_url}/repos/{owner}/{name}/{suffix.lstrip('/')}"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=TIMEOUT_SECONDS, **kwargs)
        except requests.RequestException as e:
            raise CommentPublishError(f"{method} {url} failed: {e}") from e

        if resp.status_code in (401, 403):
            raise CommentPublishError(
                f"{method} {url}: HTTP {resp.status_code}. The token needs pull-requests: write "
                f"(or issues: write) permission. {resp.text[:200]}",
                status_code=resp.status_code,
            )
        if resp.status_code == 404:
            raise CommentPublishError(
                f"{method} {url}: HTTP 404 (unknown repository or pull request)",
                status_code=404,
            )
        if not resp.ok:
            raise CommentPublishError(
                f"{method} {url}: HTTP {resp.status_code}: {resp.text[:200]!r}",
                status_code=resp.status_code,
            )
        return resp

    def author_login(self) -> str:
        """Login of the token owner (``GET /user``), looked up once."""

        if self._login is None:
            try:
                resp = self._request("GET", f"{self.cfg.api_url}/user")
            except CommentPublishError as e:
                if e.status_code != 403:
                    raise
                logger.debug("GET /user refused for this token; assuming %s", ACTIONS_BOT_LOGIN)
                self._login = ACTIONS_BOT_LOGIN
            else:
                data = resp.json()
                login = data.get("login") if isinstance(data, dict) else None
                if not login:
                    raise CommentPublishError("GET /user: response has no login")
                self._login = str(login)
        return self._login

    def list_comments(self, pr_number: int) -> List[IssueComment]:
        """All comments of a pull request, following ``Link: rel=next`` pages."""

        url: Optional[str] = self._repo_url(f"issues/{int(pr_number)}/comments")
        params: Optional[Dict[str, Any]] = {"per_page": PAGE_SIZE}
        out: List[IssueComment] = []

        while url:
            resp = self._request("GET", url, params=params)
            try:
                data = resp.json()
            except ValueError as e:
                raise CommentPublishError(f"GET {url}: response is not JSON") from e
            if not isinstance(data, list):
                raise CommentPublishError(f"GET {url}: expected a JSON list")
            out.extend(_comment_from_json(c) for c in data if isinstance(c, dict))

            nxt = resp.links.get("next") if resp.links else None
            url = nxt.get("url") if nxt else None
            # the next URL already carries the query string
            params = None

        logger.debug("PR #%s has %d comments", pr_number, len(out))
        return out

    def create_comment(self, pr_number: int, body: str) -> IssueComment:
        resp = self._request("POST", self._repo_url(f"issues/{int(pr_number)}/comments"), json={"body": body})
        return _comment_from_json(resp.json())

    def update_comment(self, comment_id: int, body: str) -> IssueComment:
        resp = self._request("PATCH", self._repo_url(f"issues/comments/{int(comment_id)}"), json={"body": body})
        return _comment_from_json(resp.json())

    def delete_comment(self, comment_id: int) -> None:
        self._request("DELETE", self._repo_url(f"issues/comments/{int(comment_id)}"))
