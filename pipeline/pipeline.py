"""pipeline.pipeline

This module defines a *single, high-level* object that represents this repo's
primary capabilities.

Why this exists
---------------
The behavior is implemented across several modules:

- :mod:`pipeline.orchestrator` runs a workflow for an event.
- :mod:`tools.bench_report` turns report JSON into markdown.
- :mod:`tools.github.sticky` publishes the sticky pull request comment.
- :mod:`tools.artifacts` stores build artifacts between jobs.

Callers (CLI, scripts, CI) should not have to wire those together themselves.
The :class:`~pipeline.pipeline.MemoryReportPipeline` facade gives the repo one
obvious entrypoint with a small API:

- ``run(...)``: run a workflow (builder job + report job)
- ``format_report(...)``: render a report file as markdown
- ``publish_comment(...)``: upsert a sticky comment outside of a workflow
- ``artifacts(...)``: artifact storage for listing and purging
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from memreport.errors import ReportFormatError

from pipeline.config import RunnerConfig, RunServices
from pipeline.events import EventContext
from pipeline.orchestrator import RunRequest, WorkflowRunResult, run_workflow
from tools.artifacts import ArtifactStorage
from tools.bench_report import (
    load_gates_report,
    load_memory_report,
    render_gates_markdown,
    render_memory_markdown,
)
from tools.github.sticky import StickyResult, publish_sticky_comment

REPORT_KINDS = ("memory", "gates")

ServicesFactory = Callable[[RunnerConfig, str], RunServices]


class MemoryReportPipeline:
    """High-level facade over the pipeline.

    Callers should prefer using this object (built via
    :func:`pipeline.wiring.build_pipeline`) rather than importing low-level
    modules directly.
    """

    def __init__(
        self,
        *,
        services_factory: ServicesFactory,
        run_fn: Callable[..., WorkflowRunResult] = run_workflow,
    ) -> None:
        self._services_factory = services_factory
        self._run_fn = run_fn

    def run(self, req: RunRequest) -> WorkflowRunResult:
        return self._run_fn(req, services_factory=self._services_factory)

    def format_report(
        self,
        report: Path,
        *,
        kind: str = "memory",
        header: str = "",
        previous: Optional[Path] = None,
    ) -> str:
        """Render *report* (and optionally a baseline) as markdown."""
        if kind == "memory":
            prev = load_memory_report(previous) if previous else None
            return render_memory_markdown(load_memory_report(report), header=header, previous=prev)
        if kind == "gates":
            prev_g = load_gates_report(previous) if previous else None
            return render_gates_markdown(load_gates_report(report), header=header, previous=prev_g)
        raise ReportFormatError(f"Unknown report kind {kind!r} (expected one of {REPORT_KINDS})")

    def publish_comment(
        self,
        config: RunnerConfig,
        event: EventContext,
        pr_number: int,
        *,
        header: str,
        message: str,
        **options: bool,
    ) -> StickyResult:
        services = self._services_factory(config, "")
        backend = services.comments(event)
        return publish_sticky_comment(backend, pr_number, header=header, message=message, **options)

    def artifacts(self, config: RunnerConfig, run_id: str = "") -> ArtifactStorage:
        return self._services_factory(config, run_id).artifacts
