"""pipeline.framework

A small job runner.

- **JobContext (ctx)**: an immutable job packet (ids, workspace, event, services)
- **StepStore (store)**: per-job scratchpad (step outputs, exported env, PATH
  additions, post hooks)
- **Actions**: registered Python callables used by ``uses:`` steps
- **run_job**: runs the steps of one job in order, fail-fast

Importing :mod:`pipeline.actions` registers the builtin actions.
"""

from .context import JobContext
from .registry import (
    ActionDefinition,
    ActionFunc,
    ActionInput,
    get_action,
    input_flag,
    input_lines,
    list_actions,
    register_action,
)
from .results import CANCELLED, FAILURE, SKIPPED, SUCCESS, JobResult, StepResult, now_iso
from .runner import run_job, step_env
from .store import StepStore

__all__ = [
    "ActionDefinition",
    "ActionFunc",
    "ActionInput",
    "CANCELLED",
    "FAILURE",
    "JobContext",
    "JobResult",
    "SKIPPED",
    "SUCCESS",
    "StepResult",
    "StepStore",
    "get_action",
    "input_flag",
    "input_lines",
    "list_actions",
    "now_iso",
    "register_action",
    "run_job",
    "step_env",
]
