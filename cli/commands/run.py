from __future__ import annotations

import sys
from typing import Optional

from cli.common import config_from_args, event_from_args, parse_csv
from pipeline.config import RunnerConfig
from pipeline.orchestrator import RunRequest
from pipeline.pipeline import MemoryReportPipeline
from pipeline.workflow_loader import resolve_workflow


def _resolve_artifacts_run_id(
    raw: Optional[str], config: RunnerConfig, pipeline: MemoryReportPipeline
) -> Optional[str]:
    """``latest`` means the newest run that stored artifacts.

    Report-only runs upload nothing, so they are never picked.
    """
    if not raw or raw.strip().lower() != "latest":
        return raw
    latest = pipeline.artifacts(config).latest_run_id()
    if latest is None:
        raise SystemExit(f"No artifacts found under {config.artifacts_root}; cannot resolve --artifacts-run-id latest.")
    print(f"ℹ️  Using artifacts from run {latest}")
    return latest


def run_run(args, pipeline: MemoryReportPipeline) -> int:
    workflow = resolve_workflow(args.workflow)
    config = config_from_args(args)
    event = event_from_args(args, source_dir=config.source_dir)

    req = RunRequest(
        workflow=workflow,
        event=event,
        config=config,
        only_jobs=tuple(parse_csv(args.jobs)),
        artifacts_run_id=_resolve_artifacts_run_id(args.artifacts_run_id, config, pipeline),
        argv=list(sys.argv),
    )
    result = pipeline.run(req)
    return int(result.exit_code)
