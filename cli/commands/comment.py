from __future__ import annotations

from pathlib import Path

from cli.common import config_from_args, event_from_args
from pipeline.pipeline import MemoryReportPipeline


def run_comment(args, pipeline: MemoryReportPipeline) -> int:
    config = config_from_args(args)
    event = event_from_args(args)
    pr_number = args.pr if args.pr is not None else event.pr_number
    if pr_number is None:
        raise SystemExit("A pull request number is required (--pr, or --from-github-env on a pull_request event).")

    message = ""
    if args.message_file:
        p = Path(args.message_file)
        if not p.is_file():
            raise SystemExit(f"Message file not found: {p}")
        message = p.read_text(encoding="utf-8")

    res = pipeline.publish_comment(
        config,
        event,
        pr_number,
        header=args.header,
        message=message,
        append=args.append,
        recreate=args.recreate,
        delete=args.delete,
        only_create=args.only_create,
        only_update=args.only_update,
        skip_unchanged=args.skip_unchanged,
    )
    print(f"✅ Sticky comment '{args.header}' on PR #{pr_number}: {res.action}")
    return 0
