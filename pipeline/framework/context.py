from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from memreport.io import RunPaths

from pipeline.config import RunnerConfig, RunServices
from pipeline.events import EventContext
from pipeline.models import JobInstance, JobSpec


@dataclass(frozen=True)
class JobContext:
    """Immutable job packet.

    Everything a step needs to know about *where* and *why* it runs. Anything a
    step produces for later steps goes into the
    :class:`~pipeline.framework.store.StepStore` instead, so this object stays
    read-only.

    Attributes
    ----------
    run_id:
        Id of the workflow run (also the artifact scope).
    job_id:
        Job key plus matrix suffix, unique within the run.
    workspace:
        Isolated working tree for this job (``github.workspace``).
    temp_dir:
        Scratch dir (``runner.temp``); step command files live here.
    artifacts_run_id:
        Run whose artifacts ``artifact/download`` reads. Same as ``run_id``
        unless a report-only run reuses an earlier build.
    """

    run_id: str
    job_id: str
    job: JobSpec
    event: EventContext
    workspace: Path
    temp_dir: Path
    paths: RunPaths
    config: RunnerConfig
    services: RunServices
    matrix: Mapping[str, Any] = field(default_factory=dict)
    artifacts_run_id: str = ""

    @staticmethod
    def for_instance(
        instance: JobInstance,
        *,
        run_id: str,
        event: EventContext,
        paths: RunPaths,
        config: RunnerConfig,
        services: RunServices,
        artifacts_run_id: str = "",
    ) -> "JobContext":
        job_id = instance.job_id
        if config.checkout_mode == "in-place":
            workspace = config.source_dir
        else:
            workspace = paths.job_workspace(job_id)
        return JobContext(
            run_id=run_id,
            job_id=job_id,
            job=instance.job,
            event=event,
            workspace=Path(workspace),
            temp_dir=paths.job_temp(job_id),
            paths=paths,
            config=config,
            services=services,
            matrix=dict(instance.matrix),
            artifacts_run_id=artifacts_run_id or run_id,
        )

    @property
    def quiet(self) -> bool:
        return self.config.quiet
