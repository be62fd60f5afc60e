from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Sequence

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class GitHubConfig:
    """Connection settings for GitHub REST calls."""

    token: str
    repository: str
    api_url: str = DEFAULT_API_URL

    @property
    def owner_repo(self) -> tuple[str, str]:
        owner, _, name = self.repository.partition("/")
        if not owner or not name:
            raise ValueError(f"repository must look like 'owner/name', got {self.repository!r}")
        return owner, name

    @staticmethod
    def from_env(environ: Mapping[str, str] = os.environ, *, repository: Optional[str] = None) -> "GitHubConfig":
        token = environ.get("GITHUB_TOKEN") or environ.get("GH_TOKEN")
        if not token:
            raise ValueError("GITHUB_TOKEN is not set.")
        repo = repository or environ.get("GITHUB_REPOSITORY")
        if not repo:
            raise ValueError("GITHUB_REPOSITORY is not set.")
        api_url = (environ.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/")
        return GitHubConfig(token=token, repository=repo, api_url=api_url)


@dataclass(frozen=True)
class IssueComment:
    id: int
    body: str
    user_login: Optional[str] = None


class CommentBackend(Protocol):
    """What the sticky-comment logic needs from a comment service."""

    def list_comments(self, pr_number: int) -> Sequence[IssueComment]: ...

    def create_comment(self, pr_number: int, body: str) -> IssueComment: ...

    def update_comment(self, comment_id: int, body: str) -> IssueComment: ...

    def delete_comment(self, comment_id: int) -> None: ...

    def author_login(self) -> Optional[str]:
        """Login new comments are written as; only its comments are sticky."""
        ...

