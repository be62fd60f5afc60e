import json
import unittest
from pathlib import Path

import pytest

from memreport.errors import WorkflowDefinitionError
from pipeline.events import EventContext
from pipeline.models import (
    JobSpec,
    StepSpec,
    Trigger,
    WorkflowSpec,
    event_is,
    event_is_not,
    expand_matrix,
    job_order,
)


def _job(key, needs=(), **kw):
    return JobSpec(key=key, needs=tuple(needs), steps=(StepSpec(name="s", run="true"),), **kw)


def _wf(*jobs):
    return WorkflowSpec(name="wf", trigger=Trigger(), jobs=tuple(jobs))


class TestWorkflowValidation(unittest.TestCase):
    def test_job_order_respects_needs_then_declaration_order(self) -> None:
        wf = _wf(_job("report", needs=["build"]), _job("lint"), _job("build"))
        self.assertEqual([j.key for j in job_order(wf)], ["lint", "build", "report"])

    def test_cycle_is_rejected(self) -> None:
        wf = _wf(_job("a", needs=["b"]), _job("b", needs=["a"]))
        with self.assertRaisesRegex(WorkflowDefinitionError, "cycle"):
            wf.validate()

    def test_unknown_need_self_need_and_duplicates(self) -> None:
        with self.assertRaisesRegex(WorkflowDefinitionError, "unknown jobs"):
            _wf(_job("a", needs=["zzz"])).validate()
        with self.assertRaisesRegex(WorkflowDefinitionError, "needs itself"):
            _wf(_job("a", needs=["a"])).validate()
        with self.assertRaisesRegex(WorkflowDefinitionError, "Duplicate job keys"):
            _wf(_job("a"), _job("a")).validate()

    def test_steps_need_exactly_one_of_uses_and_run(self) -> None:
        for step in (StepSpec(name="none"), StepSpec(name="both", uses="x/y", run="true")):
            wf = _wf(JobSpec(key="a", steps=(step,)))
            with self.assertRaisesRegex(WorkflowDefinitionError, "exactly one of uses/run"):
                wf.validate()

    def test_duplicate_step_ids(self) -> None:
        steps = (StepSpec(name="1", id="x", run="true"), StepSpec(name="2", id="x", run="true"))
        with self.assertRaisesRegex(WorkflowDefinitionError, "Duplicate step id"):
            _wf(JobSpec(key="a", steps=steps)).validate()

    def test_expand_matrix(self) -> None:
        job = _job("build", matrix={"target": ["x86", "arm"], "profile": ["release"]})
        ids = [i.job_id for i in expand_matrix(job)]
        self.assertEqual(ids, ["build-release-x86", "build-release-arm"])
        self.assertEqual([i.job_id for i in expand_matrix(_job("plain"))], ["plain"])

        with self.assertRaises(WorkflowDefinitionError):
            expand_matrix(_job("empty", matrix={"target": []}))

    def test_permissions(self) -> None:
        job = _job("r", permissions={"pull-requests": "write", "contents": "read"})
        self.assertTrue(job.has_permission("pull-requests"))
        self.assertTrue(job.has_permission("pull-requests", "read"))
        self.assertFalse(job.has_permission("contents"))
        self.assertTrue(job.has_permission("contents", "read"))
        self.assertFalse(job.has_permission("issues", "read"))


class TestTriggersAndConditions(unittest.TestCase):
    def test_trigger_matches(self) -> None:
        t = Trigger(push_branches=("master",), pull_request=True)
        self.assertTrue(t.matches(EventContext.local("push", branch="master")))
        self.assertFalse(t.matches(EventContext.local("push", branch="dev")))
        self.assertFalse(t.matches(EventContext.local("push", ref="refs/tags/v1.0.0")))
        self.assertTrue(t.matches(EventContext.local("pull_request", pr_number=1)))
        self.assertFalse(t.matches(EventContext.local("pull_request_target", pr_number=1)))
        self.assertFalse(t.matches(EventContext.local("merge_group")))

    def test_conditions(self) -> None:
        is_pr = event_is("pull_request", "pull_request_target")
        not_mq = event_is_not("merge_group")

        self.assertTrue(is_pr.evaluate(EventContext.local("pull_request_target", pr_number=3)))
        self.assertFalse(is_pr.evaluate(EventContext.local("push")))
        self.assertTrue(not_mq.evaluate(EventContext.local("push")))
        self.assertFalse(not_mq.evaluate(EventContext.local("merge_group")))

        self.assertEqual(
            is_pr.expr,
            "github.event_name == 'pull_request' || github.event_name == 'pull_request_target'",
        )
        self.assertEqual(not_mq.expr, "github.event_name != 'merge_group'")


def test_event_local_refs() -> None:
    assert EventContext.local("push", branch="master").ref == "refs/heads/master"
    pr = EventContext.local("pull_request", pr_number=12)
    assert pr.ref == "refs/pull/12/merge"
    assert pr.is_pull_request
    assert pr.branch is None


def test_event_from_github_env(tmp_path: Path) -> None:
    payload = tmp_path / "event.json"
    payload.write_text(json.dumps({"action": "synchronize", "pull_request": {"number": 77}}), encoding="utf-8")

    ev = EventContext.from_env(
        {
            "GITHUB_EVENT_NAME": "pull_request",
            "GITHUB_REF": "refs/pull/77/merge",
            "GITHUB_SHA": "abc123",
            "GITHUB_REPOSITORY": "noir-lang/noir",
            "GITHUB_EVENT_PATH": str(payload),
        }
    )

    assert ev.pr_number == 77
    assert ev.repository == "noir-lang/noir"
    assert ev.as_dict()["sha"] == "abc123"


def test_event_from_env_requires_event_name() -> None:
    with pytest.raises(ValueError):
        EventContext.from_env({})


def test_push_event_from_env_has_no_pr_number() -> None:
    ev = EventContext.from_env({"GITHUB_EVENT_NAME": "push", "GITHUB_REF": "refs/heads/master"})
    assert ev.pr_number is None
    assert ev.branch == "master"
