from __future__ import annotations

from pathlib import Path

from memreport.io import write_text_atomic
from pipeline.pipeline import MemoryReportPipeline


def run_format(args, pipeline: MemoryReportPipeline) -> int:
    markdown = pipeline.format_report(
        Path(args.report),
        kind=args.kind,
        header=args.header,
        previous=Path(args.previous) if args.previous else None,
    )
    if args.output:
        write_text_atomic(Path(args.output), markdown)
        print(f"✅ Wrote {args.output}")
    else:
        print(markdown, end="")
    return 0
