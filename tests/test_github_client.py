from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests

from memreport.errors import CommentPublishError
from tools.github.api import GitHubClient
from tools.github.sticky import publish_sticky_comment
from tools.github.types import GitHubConfig


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, links: Optional[Dict[str, Dict[str, str]]] = None):
        self.status_code = status_code
        self._payload = payload
        self.links = links or {}
        self.text = "" if payload is None else str(payload)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return self._payload


class FakeSession:
    """Records calls and replays queued responses in order."""

    def __init__(self, responses: List[FakeResponse]):
        self.headers: Dict[str, str] = {}
        self.responses = list(responses)
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


CFG = GitHubConfig(token="t0ken", repository="noir-lang/noir")
BASE = "https://api.github.com/repos/noir-lang/noir"


def _comment(cid: int, body: str, login: str = "github-actions[bot]") -> Dict[str, Any]:
    return {"id": cid, "body": body, "user": {"login": login}}


def test_auth_headers_are_set() -> None:
    session = FakeSession([])
    GitHubClient(CFG, session=session)
    assert session.headers["Authorization"] == "Bearer t0ken"
    assert session.headers["Accept"] == "application/vnd.github+json"


def test_list_comments_follows_pagination() -> None:
    page2 = f"{BASE}/issues/5/comments?page=2&per_page=100"
    session = FakeSession(
        [
            FakeResponse(200, [_comment(1, "a")], links={"next": {"url": page2}}),
            FakeResponse(200, [_comment(2, "b")]),
        ]
    )
    comments = GitHubClient(CFG, session=session).list_comments(5)

    assert [c.id for c in comments] == [1, 2]
    assert session.calls[0][1] == f"{BASE}/issues/5/comments"
    assert session.calls[0][2]["params"] == {"per_page": 100}
    assert session.calls[1][1] == page2
    assert session.calls[1][2]["params"] is None


def test_sticky_update_through_client() -> None:
    existing = _comment(11, "old\n<!-- Sticky Pull Request Commentmemory -->")
    session = FakeSession(
        [
            FakeResponse(200, {"login": "github-actions[bot]"}),
            FakeResponse(200, [_comment(10, "LGTM", "alice"), existing]),
            FakeResponse(200, _comment(11, "new")),
        ]
    )
    res = publish_sticky_comment(GitHubClient(CFG, session=session), 5, header="memory", message="new")

    assert res.action == "updated"
    assert session.calls[0][:2] == ("GET", "https://api.github.com/user")
    method, url, kwargs = session.calls[2]
    assert (method, url) == ("PATCH", f"{BASE}/issues/comments/11")
    assert kwargs["json"] == {"body": "new\n<!-- Sticky Pull Request Commentmemory -->"}


def test_sticky_create_through_client() -> None:
    session = FakeSession(
        [FakeResponse(200, {"login": "github-actions[bot]"}), FakeResponse(200, []), FakeResponse(201, _comment(12, "x"))]
    )
    res = publish_sticky_comment(GitHubClient(CFG, session=session), 5, header="memory", message="x")

    assert res.action == "created"
    assert res.created_comment_id == 12
    assert session.calls[2][:2] == ("POST", f"{BASE}/issues/5/comments")


def test_marker_in_someone_elses_comment_is_not_sticky() -> None:
    quoted = _comment(10, "see\n<!-- Sticky Pull Request Commentmemory -->", "alice")
    session = FakeSession(
        [
            FakeResponse(200, {"login": "memreport-bot"}),
            FakeResponse(200, [quoted]),
            FakeResponse(201, _comment(11, "x", "memreport-bot")),
        ]
    )
    res = publish_sticky_comment(GitHubClient(CFG, session=session), 5, header="memory", message="x")

    assert res.action == "created"
    assert [c[0] for c in session.calls] == ["GET", "GET", "POST"]


def test_workflow_token_falls_back_to_actions_bot() -> None:
    session = FakeSession([FakeResponse(403, {"message": "Resource not accessible by integration"})])
    client = GitHubClient(CFG, session=session)

    assert client.author_login() == "github-actions[bot]"
    # looked up once
    assert client.author_login() == "github-actions[bot]"
    assert len(session.calls) == 1


def test_author_lookup_propagates_bad_credentials() -> None:
    session = FakeSession([FakeResponse(401, {"message": "Bad credentials"})])
    with pytest.raises(CommentPublishError):
        GitHubClient(CFG, session=session).author_login()


@pytest.mark.parametrize("status", [401, 403, 404, 422, 500])
def test_http_errors_raise_comment_publish_error(status: int) -> None:
    session = FakeSession([FakeResponse(status, {"message": "nope"})])
    with pytest.raises(CommentPublishError) as exc:
        GitHubClient(CFG, session=session).create_comment(5, "x")
    assert exc.value.status_code == status


def test_network_error_raises_comment_publish_error() -> None:
    session = FakeSession([requests.ConnectionError("boom")])
    with pytest.raises(CommentPublishError, match="boom"):
        GitHubClient(CFG, session=session).list_comments(5)


def test_config_from_env() -> None:
    cfg = GitHubConfig.from_env({"GH_TOKEN": "x", "GITHUB_REPOSITORY": "o/r", "GITHUB_API_URL": "https://ghe/api/v3/"})
    assert cfg.owner_repo == ("o", "r")
    assert cfg.api_url == "https://ghe/api/v3"

    with pytest.raises(ValueError):
        GitHubConfig.from_env({"GITHUB_REPOSITORY": "o/r"})
