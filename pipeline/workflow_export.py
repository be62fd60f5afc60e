"""pipeline.workflow_export

Render a :class:`~pipeline.models.WorkflowSpec` as a GitHub Actions workflow
file. Export only: the YAML is never read back to drive a run.

Builtin action keys map to the hosted actions they stand in for.
"""

from __future__ import annotations

from typing import Any, Dict, List

import yaml

from pipeline.models import Condition, JobSpec, StepSpec, WorkflowSpec

# local action key -> hosted action reference
HOSTED_ACTIONS: Dict[str, str] = {
    "actions/checkout": "actions/checkout@v4",
    "toolchain/rust": "dtolnay/rust-toolchain@{toolchain}",
    "cache/rust": "Swatinem/rust-cache@v2",
    "artifact/upload": "actions/upload-artifact@v4",
    "artifact/download": "actions/download-artifact@v4",
    "bench-report/parse": "noir-lang/noir-bench-report@ccb0d806a91d3bd86dba0ba3d580a814eed5673c",
    "comment/sticky": "marocchino/sticky-pull-request-comment@v2",
}


class _LiteralStr(str):
    """Multi-line strings dumped in block style (``|``)."""


def _literal_representer(dumper: yaml.SafeDumper, data: _LiteralStr) -> yaml.Node:
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")


class _Dumper(yaml.SafeDumper):
    pass


_Dumper.add_representer(_LiteralStr, _literal_representer)


def _value(v: Any) -> Any:
    if isinstance(v, Condition):
        return "${{ " + v.expr + " }}"
    if isinstance(v, str) and "\n" in v:
        return _LiteralStr(v)
    return v


def _step(step: StepSpec) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if step.name:
        out["name"] = step.name
    if step.id:
        out["id"] = step.id
    if step.condition is not None:
        out["if"] = step.condition.expr
    if step.working_directory:
        out["working-directory"] = step.working_directory

    with_ = {k: _value(v) for k, v in step.with_.items()}
    if step.uses:
        ref = HOSTED_ACTIONS.get(step.uses, step.uses)
        if "{toolchain}" in ref:
            ref = ref.format(toolchain=with_.pop("toolchain", "stable"))
        out["uses"] = ref
    else:
        out["run"] = _value(step.run or "")

    if with_:
        out["with"] = with_
    if step.env:
        out["env"] = {k: _value(v) for k, v in step.env.items()}
    return out


def _job(job: JobSpec) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if job.name:
        out["name"] = job.name
    if job.needs:
        out["needs"] = list(job.needs)
    out["runs-on"] = job.runs_on
    if job.permissions:
        out["permissions"] = dict(job.permissions)
    if job.matrix:
        out["strategy"] = {"matrix": {k: list(v) for k, v in job.matrix.items()}}
    if job.env:
        out["env"] = dict(job.env)
    out["steps"] = [_step(s) for s in job.steps]
    return out


def workflow_to_dict(workflow: WorkflowSpec) -> Dict[str, Any]:
    on: Dict[str, Any] = {}
    t = workflow.trigger
    if t.push_branches:
        on["push"] = {"branches": list(t.push_branches)}
    for flag in ("pull_request", "pull_request_target", "merge_group"):
        if getattr(t, flag):
            on[flag] = None
    return {
        "name": workflow.name,
        "on": on,
        "jobs": {j.key: _job(j) for j in workflow.jobs},
    }


def export_workflow_yaml(workflow: WorkflowSpec) -> str:
    return yaml.dump(workflow_to_dict(workflow), Dumper=_Dumper, sort_keys=False, default_flow_style=False)


def step_summary(workflow: WorkflowSpec) -> List[str]:
    """One line per step, for ``jobs`` listings."""

    lines: List[str] = []
    for job in workflow.jobs:
        for step in job.steps:
            kind = f"uses {step.uses}" if step.uses else "run"
            cond = f" if {step.condition.expr}" if step.condition else ""
            lines.append(f"{job.key}: {step.label} ({kind}){cond}")
    return lines
