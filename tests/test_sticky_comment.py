import unittest
from pathlib import Path
import tempfile

from memreport.errors import CommentPublishError
from tools.github.local_store import LocalCommentStore
from tools.github.sticky import marker, publish_sticky_comment, strip_marker, with_marker


class TestStickyComment(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.store = LocalCommentStore(Path(self._td.name) / "comments.json")

    def tearDown(self) -> None:
        self._td.cleanup()

    def bodies(self, pr: int = 7):
        return [c.body for c in self.store.list_comments(pr)]

    def test_marker_format(self) -> None:
        self.assertEqual(marker("memory"), "<!-- Sticky Pull Request Commentmemory -->")
        body = with_marker("# Memory Report\n\n| a | b |\n", "memory")
        self.assertTrue(body.endswith("\n<!-- Sticky Pull Request Commentmemory -->"))
        self.assertEqual(strip_marker(body, "memory"), "# Memory Report\n\n| a | b |")

    def test_create_then_update_keeps_one_comment(self) -> None:
        first = publish_sticky_comment(self.store, 7, header="memory", message="v1")
        self.assertEqual(first.action, "created")

        second = publish_sticky_comment(self.store, 7, header="memory", message="v2")
        self.assertEqual(second.action, "updated")
        self.assertEqual(second.previous_comment_id, first.created_comment_id)

        self.assertEqual(self.bodies(), [with_marker("v2", "memory")])

    def test_headers_are_independent(self) -> None:
        publish_sticky_comment(self.store, 7, header="memory", message="mem")
        publish_sticky_comment(self.store, 7, header="gates", message="gates")
        self.assertEqual(len(self.bodies()), 2)

    def test_other_comments_are_left_alone(self) -> None:
        self.store.create_comment(7, "LGTM")
        publish_sticky_comment(self.store, 7, header="memory", message="mem")
        publish_sticky_comment(self.store, 7, header="memory", message="mem 2")
        self.assertEqual(self.bodies()[0], "LGTM")
        self.assertEqual(len(self.bodies()), 2)

    def test_marker_quoted_by_someone_else_is_not_rewritten(self) -> None:
        alice = LocalCommentStore(self.store.path, user_login="alice")
        quoted = alice.create_comment(7, with_marker("# Memory Report", "memory"))

        res = publish_sticky_comment(self.store, 7, header="memory", message="bot report")

        self.assertEqual(res.action, "created")
        comments = self.store.list_comments(7)
        self.assertEqual(
            [(c.id, c.user_login) for c in comments],
            [(quoted.id, "alice"), (res.created_comment_id, "memreport[bot]")],
        )
        self.assertEqual(comments[0].body, quoted.body)

        again = publish_sticky_comment(self.store, 7, header="memory", message="bot report 2")
        self.assertEqual(again.action, "updated")
        self.assertEqual(again.previous_comment_id, res.created_comment_id)

    def test_append(self) -> None:
        publish_sticky_comment(self.store, 7, header="memory", message="one")
        publish_sticky_comment(self.store, 7, header="memory", message="two", append=True)
        self.assertEqual(self.bodies(), [with_marker("one\ntwo", "memory")])

    def test_recreate_replaces_comment(self) -> None:
        first = publish_sticky_comment(self.store, 7, header="memory", message="one")
        res = publish_sticky_comment(self.store, 7, header="memory", message="two", recreate=True)
        self.assertEqual(res.action, "recreated")
        self.assertNotEqual(res.created_comment_id, first.created_comment_id)
        self.assertEqual(self.bodies(), [with_marker("two", "memory")])

    def test_delete(self) -> None:
        publish_sticky_comment(self.store, 7, header="memory", message="one")
        res = publish_sticky_comment(self.store, 7, header="memory", delete=True)
        self.assertEqual(res.action, "deleted")
        self.assertEqual(self.bodies(), [])
        self.assertEqual(publish_sticky_comment(self.store, 7, header="memory", delete=True).action, "skipped")

    def test_only_create_and_only_update(self) -> None:
        self.assertEqual(
            publish_sticky_comment(self.store, 7, header="memory", message="x", only_update=True).action,
            "skipped",
        )
        publish_sticky_comment(self.store, 7, header="memory", message="x")
        self.assertEqual(
            publish_sticky_comment(self.store, 7, header="memory", message="y", only_create=True).action,
            "skipped",
        )
        self.assertEqual(self.bodies(), [with_marker("x", "memory")])

    def test_skip_unchanged(self) -> None:
        publish_sticky_comment(self.store, 7, header="memory", message="x")
        res = publish_sticky_comment(self.store, 7, header="memory", message="x", skip_unchanged=True)
        self.assertEqual(res.action, "unchanged")

    def test_invalid_requests_raise(self) -> None:
        with self.assertRaises(CommentPublishError):
            publish_sticky_comment(self.store, 0, header="memory", message="x")
        with self.assertRaises(CommentPublishError):
            publish_sticky_comment(self.store, 7, header="memory", message="   ")
        with self.assertRaises(CommentPublishError):
            publish_sticky_comment(self.store, 7, header="memory", message="x", only_create=True, only_update=True)
