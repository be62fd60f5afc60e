"""tools/github/local_store.py

A JSON-file comment service with the same interface as
:class:`tools.github.api.GitHubClient`.

Local runs and tests publish here instead of GitHub. File shape::

    {"next_id": 3,
     "pull_requests": {"12": [{"id": 1, "body": "...", "user": "memreport"}]}}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from memreport.errors import CommentPublishError
from memreport.io import read_json_object, write_json_atomic

from .types import IssueComment

DEFAULT_USER = "memreport[bot]"


class LocalCommentStore:
    def __init__(self, path: Path, *, user_login: str = DEFAULT_USER) -> None:
        self.path = Path(path)
        self.user_login = user_login

    def author_login(self) -> str:
        return self.user_login

    def _load(self) -> Dict[str, Any]:
        data = read_json_object(self.path) or {}
        data.setdefault("next_id", 1)
        data.setdefault("pull_requests", {})
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        write_json_atomic(self.path, data)

    def list_comments(self, pr_number: int) -> List[IssueComment]:
        rows = self._load()["pull_requests"].get(str(int(pr_number)), [])
        return [IssueComment(id=int(r["id"]), body=str(r["body"]), user_login=r.get("user")) for r in rows]

    def create_comment(self, pr_number: int, body: str) -> IssueComment:
        data = self._load()
        cid = int(data["next_id"])
        data["next_id"] = cid + 1
        data["pull_requests"].setdefault(str(int(pr_number)), []).append(
            {"id": cid, "body": body, "user": self.user_login}
        )
        self._save(data)
        return IssueComment(id=cid, body=body, user_login=self.user_login)

    def _find(self, data: Dict[str, Any], comment_id: int) -> tuple[list, int]:
        for rows in data["pull_requests"].values():
            for i, r in enumerate(rows):
                if int(r["id"]) == int(comment_id):
                    return rows, i
        raise CommentPublishError(f"Comment {comment_id} not found", status_code=404)

    def update_comment(self, comment_id: int, body: str) -> IssueComment:
        data = self._load()
        rows, i = self._find(data, comment_id)
        rows[i]["body"] = body
        self._save(data)
        return IssueComment(id=int(comment_id), body=body, user_login=rows[i].get("user"))

    def delete_comment(self, comment_id: int) -> None:
        data = self._load()
        rows, i = self._find(data, comment_id)
        del rows[i]
        self._save(data)
