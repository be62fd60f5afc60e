"""pipeline.workflows

Builtin workflow definitions, by name.
"""

from __future__ import annotations

from typing import Dict

from pipeline.models import WorkflowSpec

from .memory_report import WORKFLOW as MEMORY_REPORT

WORKFLOWS: Dict[str, WorkflowSpec] = {
    "memory_report": MEMORY_REPORT,
}

DEFAULT_WORKFLOW = "memory_report"
