#!/usr/bin/env python3
"""
CLI for the memory report pipeline.

Subcommands:
  run        - run a workflow (builder job + report job) for an event
  format     - render a benchmark report JSON file as markdown
  comment    - create/update/delete a sticky pull request comment
  artifacts  - list or purge stored artifacts
  export     - print a workflow as GitHub Actions YAML
  jobs       - print jobs in execution order

Usage:
  python memreport_cli.py run --event push --branch master
  python memreport_cli.py run --event pull_request --pr 42 --comments-store runs/comments.json
  python memreport_cli.py run --jobs generate_memory_report --artifacts-run-id 2026101801120000 --event pull_request --pr 42
  python memreport_cli.py format memory_report.json --header "# Memory Report"
  python memreport_cli.py comment --pr 42 --header memory --message-file report.md
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from cli.args.base import add_base_args
from cli.args.subcommands import add_subcommands
from cli.common import configure_logging
from cli.dispatch import dispatch
from pipeline.wiring import build_pipeline


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build, measure and report peak memory of test programs.")
    add_base_args(parser)
    add_subcommands(parser)
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    # Build first: loads .env so env-derived defaults below see it.
    pipeline = build_pipeline()
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        code = dispatch(args, pipeline)
    except KeyboardInterrupt:
        print("\n🛑 Cancelled.")
        code = 130
    raise SystemExit(code)


if __name__ == "__main__":
    main()
