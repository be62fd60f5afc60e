from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from memreport.errors import MeasurementError

from pipeline.framework import ActionInput, JobContext, StepStore, input_flag, register_action
from tools.bench_report import (
    load_gates_report,
    load_memory_report,
    render_gates_markdown,
    render_memory_markdown,
)


def _resolve(ctx: JobContext, raw: Optional[str]) -> Optional[Path]:
    if not raw or not raw.strip():
        return None
    p = Path(raw.strip())
    return p if p.is_absolute() else ctx.workspace / p


@register_action(
    "bench-report/parse",
    description="Format a benchmark report file as markdown (output: markdown)",
    inputs=[
        ActionInput("report", required=True),
        ActionInput("header", default=""),
        ActionInput("memory_report", default="false"),
        ActionInput("previous_report", default=""),
    ],
)
def parse_report(ctx: JobContext, store: StepStore, inputs: Mapping[str, str]) -> Dict[str, Any]:
    report = _resolve(ctx, inputs["report"])
    if report is None or not report.is_file():
        raise MeasurementError(f"Report file was not produced: {report}")
    previous_path = _resolve(ctx, inputs.get("previous_report"))
    header = inputs.get("header", "")

    if input_flag(inputs.get("memory_report")):
        entries = load_memory_report(report)
        previous = load_memory_report(previous_path) if previous_path else None
        markdown = render_memory_markdown(entries, header=header, previous=previous)
    else:
        gates = load_gates_report(report)
        prev_gates = load_gates_report(previous_path) if previous_path else None
        markdown = render_gates_markdown(gates, header=header, previous=prev_gates)

    print(markdown)
    return {"markdown": markdown}
