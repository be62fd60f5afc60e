from __future__ import annotations

from pathlib import Path

from memreport.io import write_text_atomic
from pipeline.models import job_order
from pipeline.workflow_export import export_workflow_yaml, step_summary
from pipeline.workflow_loader import resolve_workflow


def run_export(args) -> int:
    workflow = resolve_workflow(args.workflow)
    text = export_workflow_yaml(workflow)
    if args.output:
        write_text_atomic(Path(args.output), text)
        print(f"✅ Wrote {args.output}")
    else:
        print(text, end="")
    return 0


def run_jobs(args) -> int:
    workflow = resolve_workflow(args.workflow)
    print(f"{workflow.name}: {' -> '.join(j.key for j in job_order(workflow))}")
    for line in step_summary(workflow):
        print(line)
    return 0
