"""pipeline.orchestrator

High-level orchestration entrypoint: run one workflow for one event.

Design principles
-----------------
- Keep the CLI thin: parse args + build a :class:`RunRequest` + call
  :func:`run_workflow`.
- Jobs run one after another in dependency order; a job runs only when every
  job it needs succeeded, otherwise it is recorded as ``skipped``.
- Filesystem layout comes from :mod:`memreport.io.layout`; the run manifest is
  always written, also for failed and cancelled runs.

This module is intentionally "boring": it wires together existing components.
"""

from __future__ import annotations

import logging
import platform
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from memreport import __version__
from memreport.errors import WorkflowDefinitionError
from memreport.io import RunPaths, prepare_run_paths, write_json_atomic

from pipeline.config import RunnerConfig, RunServices
from pipeline.core import EXIT_CANCELLED, EXIT_FAILED, EXIT_OK
from pipeline.events import EventContext
from pipeline.framework import CANCELLED, FAILURE, SKIPPED, SUCCESS, JobContext, JobResult, now_iso, run_job
from pipeline.models import JobSpec, WorkflowSpec, expand_matrix, job_order

logger = logging.getLogger(__name__)

NOT_TRIGGERED = "not_triggered"

ServicesFactory = Callable[[RunnerConfig, str], RunServices]


@dataclass(frozen=True)
class RunRequest:
    """Parameters for one workflow run.

    ``only_jobs`` limits the run to some jobs. Jobs they need that are left
    out are assumed to have succeeded in the run named by
    ``artifacts_run_id``, whose artifacts are then downloaded.
    """

    workflow: WorkflowSpec
    event: EventContext
    config: RunnerConfig
    only_jobs: Sequence[str] = ()
    artifacts_run_id: Optional[str] = None
    argv: Optional[Sequence[str]] = None


@dataclass
class WorkflowRunResult:
    status: str
    run_id: Optional[str] = None
    run_dir: Optional[Path] = None
    manifest: Optional[Path] = None
    jobs: List[JobResult] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        if self.status == CANCELLED:
            return EXIT_CANCELLED
        if self.status == FAILURE:
            return EXIT_FAILED
        return EXIT_OK

    def job(self, key_or_id: str) -> JobResult:
        for j in self.jobs:
            if j.job_id == key_or_id or j.job_key == key_or_id:
                return j
        raise KeyError(f"No job {key_or_id!r} in this run")


def _selected_jobs(req: RunRequest) -> List[JobSpec]:
    ordered = job_order(req.workflow)
    if not req.only_jobs:
        return ordered

    wanted = set(req.only_jobs)
    unknown = sorted(wanted - {j.key for j in ordered})
    if unknown:
        raise WorkflowDefinitionError(f"Unknown jobs requested: {unknown}")

    selected = [j for j in ordered if j.key in wanted]
    outside = sorted({n for j in selected for n in j.needs if n not in wanted})
    if outside and not req.artifacts_run_id:
        raise WorkflowDefinitionError(
            f"Jobs {sorted(wanted)} need {outside}, which are not part of this run; "
            "pass the run id that produced their artifacts (--artifacts-run-id)."
        )
    return selected


def _runtime_environment() -> Dict[str, Any]:
    return {
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "memreport": __version__,
    }


def _write_manifest(paths: RunPaths, req: RunRequest, result: WorkflowRunResult, started_at: str) -> Path:
    data = {
        "run_id": paths.run_id,
        "workflow": req.workflow.name,
        "status": result.status,
        "started_at": started_at,
        "finished_at": now_iso(),
        "event": req.event.as_dict(),
        "artifacts_run_id": req.artifacts_run_id or paths.run_id,
        "only_jobs": list(req.only_jobs),
        "config": {
            "source_dir": str(req.config.source_dir),
            "checkout_mode": req.config.checkout_mode,
            "artifacts_root": str(req.config.artifacts_root),
            "cache_root": str(req.config.cache_root),
        },
        "argv": list(req.argv) if req.argv is not None else None,
        "runtime": _runtime_environment(),
        "jobs": [j.as_dict() for j in result.jobs],
    }
    write_json_atomic(paths.manifest, data)
    return paths.manifest


def _overall_status(jobs: Sequence[JobResult]) -> str:
    statuses = {j.status for j in jobs}
    if CANCELLED in statuses:
        return CANCELLED
    if FAILURE in statuses:
        return FAILURE
    return SUCCESS


def run_workflow(req: RunRequest, *, services_factory: ServicesFactory) -> WorkflowRunResult:
    """Run *req.workflow* for *req.event*.

    Returns a result whose ``exit_code`` is 0 (success or not triggered),
    1 (a job failed) or 130 (cancelled).
    """
    req.workflow.validate()

    if not req.workflow.trigger.matches(req.event):
        print(f"ℹ️  '{req.workflow.name}' is not triggered by {req.event.event_name} {req.event.ref}".rstrip())
        return WorkflowRunResult(status=NOT_TRIGGERED)

    selected = _selected_jobs(req)

    paths = prepare_run_paths(req.config.runs_root)
    started_at = now_iso()
    services = services_factory(req.config, paths.run_id)
    result = WorkflowRunResult(status=SUCCESS, run_id=paths.run_id, run_dir=paths.run_dir)
    print(f"🚀 {req.workflow.name}: run {paths.run_id} ({req.event.event_name} {req.event.ref})")

    # job key -> did every instance succeed
    job_ok: Dict[str, bool] = {}
    cancelled = False

    for job in selected:
        instances = expand_matrix(job)
        if cancelled:
            for inst in instances:
                result.jobs.append(JobResult(inst.job_id, job.key, CANCELLED, matrix=dict(inst.matrix), reason="run cancelled"))
            job_ok[job.key] = False
            continue

        blocked = [n for n in job.needs if n in job_ok and not job_ok[n]]
        if blocked:
            print(f"\n⏭  Job {job.key} skipped: needs {blocked} did not succeed")
            for inst in instances:
                result.jobs.append(
                    JobResult(inst.job_id, job.key, SKIPPED, matrix=dict(inst.matrix), reason=f"needs {blocked} did not succeed")
                )
            job_ok[job.key] = False
            continue

        all_ok = True
        failed_id = ""
        for pos, inst in enumerate(instances):
            if not all_ok or cancelled:
                # fail-fast: instances after the first failed one never start
                status, reason = (CANCELLED, "run cancelled") if cancelled else (SKIPPED, f"{failed_id} did not succeed")
                for rest in instances[pos:]:
                    result.jobs.append(JobResult(rest.job_id, job.key, status, matrix=dict(rest.matrix), reason=reason))
                break
            ctx = JobContext.for_instance(
                inst,
                run_id=paths.run_id,
                event=req.event,
                paths=paths,
                config=req.config,
                services=services,
                artifacts_run_id=req.artifacts_run_id or paths.run_id,
            )
            try:
                jr = run_job(ctx)
            except KeyboardInterrupt:
                jr = JobResult(inst.job_id, job.key, CANCELLED, matrix=dict(inst.matrix), reason="run cancelled")
            except Exception as e:
                logger.debug("job %s raised", inst.job_id, exc_info=True)
                print(f"❌ Job {inst.job_id}: {e}")
                jr = JobResult(inst.job_id, job.key, FAILURE, matrix=dict(inst.matrix), reason=str(e), errors=[str(e)])
            result.jobs.append(jr)
            if jr.status == CANCELLED:
                cancelled = True
            if not jr.ok:
                all_ok = False
                failed_id = inst.job_id
        job_ok[job.key] = all_ok and not cancelled

    result.status = _overall_status(result.jobs)
    result.manifest = _write_manifest(paths, req, result, started_at)
    logger.info("run %s finished with status %s", paths.run_id, result.status)
    print(f"\n🏁 Run {paths.run_id}: {result.status} (manifest: {result.manifest})")
    return result
