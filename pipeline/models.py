"""pipeline.models

Typed workflow model.

A workflow is plain Python data: a :class:`WorkflowSpec` holding a
:class:`Trigger` and an ordered tuple of :class:`JobSpec`, each an ordered
tuple of :class:`StepSpec`. Execution is driven only by these objects; the
GitHub Actions YAML form is produced from them (see
:mod:`pipeline.workflow_export`), never the other way round.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from memreport.errors import WorkflowDefinitionError

from pipeline.events import EventContext


@dataclass(frozen=True)
class Trigger:
    """When a workflow runs.

    ``push`` events match only for branches listed in ``push_branches``; the
    pull-request flags match any action of their event.
    """

    push_branches: Tuple[str, ...] = ()
    pull_request: bool = False
    pull_request_target: bool = False
    merge_group: bool = False

    def matches(self, event: EventContext) -> bool:
        name = event.event_name
        if name == "push":
            return event.branch is not None and event.branch in self.push_branches
        if name == "pull_request":
            return self.pull_request
        if name == "pull_request_target":
            return self.pull_request_target
        if name == "merge_group":
            return self.merge_group
        return False


@dataclass(frozen=True)
class Condition:
    """A step ``if:`` restricted to the event name.

    ``Condition(frozenset({"a", "b"}))`` is true when the event is ``a`` or
    ``b``; with ``negate=True`` it is true for every other event.
    """

    event_names: FrozenSet[str]
    negate: bool = False

    def evaluate(self, event: EventContext) -> bool:
        hit = event.event_name in self.event_names
        return not hit if self.negate else hit

    @property
    def expr(self) -> str:
        op, join = ("!=", " && ") if self.negate else ("==", " || ")
        return join.join(f"github.event_name {op} '{n}'" for n in sorted(self.event_names))


def event_is(*names: str) -> Condition:
    return Condition(frozenset(names))


def event_is_not(*names: str) -> Condition:
    return Condition(frozenset(names), negate=True)


@dataclass(frozen=True)
class StepSpec:
    """One step of a job: either an action (``uses``) or a shell script (``run``)."""

    name: str
    uses: Optional[str] = None
    run: Optional[str] = None
    id: Optional[str] = None
    with_: Mapping[str, Any] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)
    working_directory: Optional[str] = None
    condition: Optional[Condition] = None

    @property
    def label(self) -> str:
        return self.name or self.id or (self.uses or "run")


@dataclass(frozen=True)
class JobSpec:
    """A job: ordered steps, dependencies and permissions.

    ``matrix`` maps an axis name to its values; the job runs once per
    combination (see :func:`expand_matrix`).
    """

    key: str
    steps: Tuple[StepSpec, ...]
    name: Optional[str] = None
    needs: Tuple[str, ...] = ()
    permissions: Mapping[str, str] = field(default_factory=dict)
    matrix: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)
    runs_on: str = "ubuntu-latest"

    def has_permission(self, scope: str, level: str = "write") -> bool:
        granted = self.permissions.get(scope)
        if granted is None:
            return False
        if level == "read":
            return granted in {"read", "write"}
        return granted == level


@dataclass(frozen=True)
class JobInstance:
    """One matrix combination of a job."""

    job: JobSpec
    matrix: Mapping[str, Any] = field(default_factory=dict)

    @property
    def job_id(self) -> str:
        if not self.matrix:
            return self.job.key
        suffix = "-".join(str(self.matrix[k]) for k in sorted(self.matrix))
        return f"{self.job.key}-{suffix}"


@dataclass(frozen=True)
class WorkflowSpec:
    name: str
    trigger: Trigger
    jobs: Tuple[JobSpec, ...]

    def job(self, key: str) -> JobSpec:
        for j in self.jobs:
            if j.key == key:
                return j
        raise KeyError(f"Unknown job: {key}")

    def validate(self) -> None:
        """Raise :class:`WorkflowDefinitionError` on an inconsistent workflow."""

        keys: List[str] = [j.key for j in self.jobs]
        dupes = sorted({k for k in keys if keys.count(k) > 1})
        if dupes:
            raise WorkflowDefinitionError(f"Duplicate job keys: {dupes}")

        known = set(keys)
        for j in self.jobs:
            unknown = [n for n in j.needs if n not in known]
            if unknown:
                raise WorkflowDefinitionError(f"Job '{j.key}' needs unknown jobs: {unknown}")
            if j.key in j.needs:
                raise WorkflowDefinitionError(f"Job '{j.key}' needs itself")
            _validate_steps(j)

        # raises on cycles
        job_order(self)


def _validate_steps(job: JobSpec) -> None:
    if not job.steps:
        raise WorkflowDefinitionError(f"Job '{job.key}' has no steps")
    seen_ids: set[str] = set()
    for step in job.steps:
        if bool(step.uses) == bool(step.run):
            raise WorkflowDefinitionError(
                f"Step '{step.label}' in job '{job.key}' must set exactly one of uses/run"
            )
        if step.id:
            if step.id in seen_ids:
                raise WorkflowDefinitionError(f"Duplicate step id '{step.id}' in job '{job.key}'")
            seen_ids.add(step.id)


def job_order(workflow: WorkflowSpec) -> List[JobSpec]:
    """Topological order of jobs by ``needs``.

    Among jobs that are ready at the same time, declaration order wins, so the
    result is deterministic.
    """

    remaining: Dict[str, JobSpec] = {j.key: j for j in workflow.jobs}
    done: set[str] = set()
    ordered: List[JobSpec] = []

    while remaining:
        ready = [j for j in workflow.jobs if j.key in remaining and all(n in done for n in j.needs)]
        if not ready:
            raise WorkflowDefinitionError(f"Dependency cycle between jobs: {sorted(remaining)}")
        nxt = ready[0]
        ordered.append(nxt)
        done.add(nxt.key)
        del remaining[nxt.key]

    return ordered


def expand_matrix(job: JobSpec) -> List[JobInstance]:
    """Cartesian product of the job's matrix axes (axis order = sorted names)."""

    if not job.matrix:
        return [JobInstance(job=job)]

    axes = sorted(job.matrix)
    for axis in axes:
        if not list(job.matrix[axis]):
            raise WorkflowDefinitionError(f"Matrix axis '{axis}' of job '{job.key}' is empty")

    out: List[JobInstance] = []
    for combo in itertools.product(*(list(job.matrix[a]) for a in axes)):
        out.append(JobInstance(job=job, matrix=dict(zip(axes, combo))))
    return out
