from __future__ import annotations

import argparse

from memreport.errors import PipelineError

from cli.commands.artifacts import run_artifacts
from cli.commands.comment import run_comment
from cli.commands.export import run_export, run_jobs
from cli.commands.report import run_format
from cli.commands.run import run_run
from pipeline.pipeline import MemoryReportPipeline


def dispatch(args: argparse.Namespace, pipeline: MemoryReportPipeline) -> int:
    """Route a parsed command line to its subcommand.

    Pipeline errors outside a workflow run (bad report file, comment API
    failure, invalid workflow file) become ``SystemExit`` with the message.
    Inside a run they are already step failures.
    """
    command = args.command
    try:
        if command == "run":
            return run_run(args, pipeline)
        if command == "format":
            return run_format(args, pipeline)
        if command == "comment":
            return run_comment(args, pipeline)
        if command == "artifacts":
            return run_artifacts(args, pipeline)
        if command == "export":
            return run_export(args)
        if command == "jobs":
            return run_jobs(args)
    except PipelineError as e:
        raise SystemExit(f"❌ {e}")
    raise SystemExit(f"Unknown command: {command}")
