"""pipeline.workflow_loader

Load workflow definitions by builtin name or from a Python file.

Runtime policy:
- YAML must NOT drive execution.
- Workflows are typed Python objects (:class:`pipeline.models.WorkflowSpec`).

A Python workflow file should export ``WORKFLOW`` (alias ``WORKFLOW_DEF``).
"""

from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Any

from memreport.errors import WorkflowDefinitionError

from pipeline.models import WorkflowSpec
from pipeline.workflows import WORKFLOWS


def _load_module_from_path(path: Path) -> ModuleType:
    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(f"Workflow file not found: {p}")
    if p.suffix.lower() != ".py":
        raise ValueError(f"Workflow file must be a .py file: {p}")
    mod_name = f"memreport_workflow_{p.stem}_{abs(hash(str(p)))}"
    spec = importlib.util.spec_from_file_location(mod_name, str(p))
    if spec is None or spec.loader is None:
        raise ImportError(f"Unable to import workflow file: {p}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def load_workflow_py(path: str | Path) -> WorkflowSpec:
    """Load and validate a workflow from a Python file."""

    mod = _load_module_from_path(Path(path))
    candidate: Any = None
    for name in ("WORKFLOW", "WORKFLOW_DEF"):
        if hasattr(mod, name):
            candidate = getattr(mod, name)
            break

    if candidate is None:
        raise WorkflowDefinitionError(f"{path}: workflow .py must export WORKFLOW (WorkflowSpec)")
    if not isinstance(candidate, WorkflowSpec):
        raise WorkflowDefinitionError(
            f"{path}: unsupported WORKFLOW type {type(candidate).__name__}; expected WorkflowSpec"
        )
    candidate.validate()
    return candidate


def resolve_workflow(name_or_path: str) -> WorkflowSpec:
    """Builtin workflow by name, or a ``.py`` file path."""

    key = str(name_or_path).strip()
    if key in WORKFLOWS:
        wf = WORKFLOWS[key]
        wf.validate()
        return wf
    if key.endswith(".py") or Path(key).exists():
        return load_workflow_py(key)
    raise WorkflowDefinitionError(f"Unknown workflow '{key}'. Builtin: {sorted(WORKFLOWS)}")
