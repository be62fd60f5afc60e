import unittest
from pathlib import Path

import pytest
import yaml

from memreport.errors import WorkflowDefinitionError
from pipeline.events import EventContext
from pipeline.framework import list_actions
from pipeline.models import job_order
from pipeline.workflow_export import export_workflow_yaml, step_summary
from pipeline.workflow_loader import load_workflow_py, resolve_workflow
from pipeline.workflows import DEFAULT_WORKFLOW
from pipeline.workflows.memory_report import WORKFLOW

import pipeline.actions  # noqa: F401


class TestMemoryReportWorkflow(unittest.TestCase):
    def test_is_valid_and_ordered(self) -> None:
        WORKFLOW.validate()
        self.assertEqual([j.key for j in job_order(WORKFLOW)], ["build-nargo", "generate_memory_report"])

    def test_triggers(self) -> None:
        self.assertTrue(WORKFLOW.trigger.matches(EventContext.local("push", branch="master")))
        self.assertTrue(WORKFLOW.trigger.matches(EventContext.local("pull_request", pr_number=1)))
        self.assertFalse(WORKFLOW.trigger.matches(EventContext.local("push", branch="feature")))

    def test_report_job_can_comment_only_on_pull_requests(self) -> None:
        report = WORKFLOW.job("generate_memory_report")
        self.assertTrue(report.has_permission("pull-requests", "write"))
        sticky = report.steps[-1]
        self.assertEqual(sticky.uses, "comment/sticky")
        self.assertEqual(sticky.with_["header"], "memory")
        self.assertTrue(sticky.condition.evaluate(EventContext.local("pull_request_target", pr_number=1)))
        self.assertFalse(sticky.condition.evaluate(EventContext.local("push", branch="master")))

    def test_every_action_used_is_registered(self) -> None:
        registered = {a.key for a in list_actions()}
        for job in WORKFLOW.jobs:
            for step in job.steps:
                if step.uses:
                    self.assertIn(step.uses, registered)

    def test_builtin_name_resolves(self) -> None:
        self.assertIs(resolve_workflow(DEFAULT_WORKFLOW), WORKFLOW)
        with self.assertRaises(WorkflowDefinitionError):
            resolve_workflow("nope")


def test_export_yaml_matches_hosted_workflow_shape() -> None:
    doc = yaml.safe_load(export_workflow_yaml(WORKFLOW))

    assert doc["name"] == "Report Peak Memory"
    assert doc["on"]["push"] == {"branches": ["master"]}
    assert "pull_request" in doc["on"]

    build = doc["jobs"]["build-nargo"]
    assert build["strategy"]["matrix"] == {"target": ["x86_64-unknown-linux-gnu"]}
    assert build["steps"][1]["uses"] == "dtolnay/rust-toolchain@1.74.1"
    assert build["steps"][2]["with"]["save-if"] == "${{ github.event_name != 'merge_group' }}"
    assert build["steps"][5]["with"]["retention-days"] == 3

    report = doc["jobs"]["generate_memory_report"]
    assert report["needs"] == ["build-nargo"]
    assert report["permissions"] == {"pull-requests": "write"}
    assert report["steps"][3]["working-directory"] == "./test_programs"
    assert report["steps"][-1]["if"] == "github.event_name == 'pull_request' || github.event_name == 'pull_request_target'"
    assert report["steps"][-1]["uses"].startswith("marocchino/sticky-pull-request-comment")


def test_step_summary_lists_conditions() -> None:
    lines = step_summary(WORKFLOW)
    assert lines[0] == "build-nargo: Checkout Noir repo (uses actions/checkout)"
    assert lines[-1].endswith("if github.event_name == 'pull_request' || github.event_name == 'pull_request_target'")


def test_load_workflow_from_python_file(tmp_path: Path) -> None:
    wf_file = tmp_path / "tiny.py"
    wf_file.write_text(
        "from pipeline.models import JobSpec, StepSpec, Trigger, WorkflowSpec\n"
        "WORKFLOW = WorkflowSpec(name='tiny', trigger=Trigger(push_branches=('main',)),\n"
        "    jobs=(JobSpec(key='only', steps=(StepSpec(name='hi', run='echo hi'),)),))\n",
        encoding="utf-8",
    )
    wf = resolve_workflow(str(wf_file))
    assert wf.name == "tiny"


def test_load_workflow_rejects_bad_exports(tmp_path: Path) -> None:
    missing = tmp_path / "missing.py"
    missing.write_text("X = 1\n", encoding="utf-8")
    with pytest.raises(WorkflowDefinitionError, match="must export WORKFLOW"):
        load_workflow_py(missing)

    wrong = tmp_path / "wrong.py"
    wrong.write_text("WORKFLOW = {'name': 'x'}\n", encoding="utf-8")
    with pytest.raises(WorkflowDefinitionError, match="expected WorkflowSpec"):
        load_workflow_py(wrong)
