from __future__ import annotations

import argparse

from pipeline.pipeline import REPORT_KINDS
from pipeline.workflows import DEFAULT_WORKFLOW

from .base import add_event_args, add_runner_args


def _add_workflow_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--workflow",
        default=DEFAULT_WORKFLOW,
        help=f"Builtin workflow name or path to a workflow .py file (default: {DEFAULT_WORKFLOW}).",
    )


def add_subcommands(parser: argparse.ArgumentParser) -> None:
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a workflow for an event")
    _add_workflow_arg(run)
    add_event_args(run)
    add_runner_args(run)
    run.add_argument(
        "--jobs",
        help="Comma-separated job keys to run (default: all). Needed jobs left out require --artifacts-run-id.",
    )
    run.add_argument(
        "--artifacts-run-id",
        help="Download artifacts from this earlier run (or `latest`) instead of this one.",
    )

    fmt = sub.add_parser("format", help="Render a benchmark report file as markdown")
    fmt.add_argument("report", help="Report JSON file")
    fmt.add_argument("--kind", choices=REPORT_KINDS, default="memory")
    fmt.add_argument("--header", default="", help="Markdown placed above the table.")
    fmt.add_argument("--previous", help="Baseline report; adds a change column.")
    fmt.add_argument("--output", help="Write markdown here instead of stdout.")

    com = sub.add_parser("comment", help="Create or update a sticky pull request comment")
    add_event_args(com)
    com.add_argument("--header", default="", help="Sticky comment header (identifies the comment).")
    body = com.add_mutually_exclusive_group(required=True)
    body.add_argument("--message-file", help="Markdown file with the comment body.")
    body.add_argument("--delete", action="store_true", help="Delete the sticky comment instead.")
    com.add_argument("--append", action="store_true")
    com.add_argument("--recreate", action="store_true")
    com.add_argument("--only-create", action="store_true")
    com.add_argument("--only-update", action="store_true")
    com.add_argument("--skip-unchanged", action="store_true")

    art = sub.add_parser("artifacts", help="Inspect or purge stored artifacts")
    art_sub = art.add_subparsers(dest="artifacts_command", required=True)
    ls = art_sub.add_parser("list", help="List artifacts of one run (default: all runs)")
    ls.add_argument("--run-id", help="Only this run.")
    art_sub.add_parser("purge", help="Delete expired artifacts")

    exp = sub.add_parser("export", help="Print a workflow as GitHub Actions YAML")
    _add_workflow_arg(exp)
    exp.add_argument("--output", help="Write YAML here instead of stdout.")

    jobs = sub.add_parser("jobs", help="Print jobs in execution order with their steps")
    _add_workflow_arg(jobs)
