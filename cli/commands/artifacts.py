from __future__ import annotations

from cli.common import config_from_args
from pipeline.pipeline import MemoryReportPipeline
from tools.artifacts import utc_now


def run_artifacts(args, pipeline: MemoryReportPipeline) -> int:
    config = config_from_args(args)
    storage = pipeline.artifacts(config)

    if args.artifacts_command == "purge":
        removed = storage.purge_expired()
        for info in removed:
            print(f"🗑  {info.run_id}/{info.name} (expired {info.expires_at.isoformat()})")
        print(f"✅ Purged {len(removed)} expired artifact(s) from {config.artifacts_root}")
        return 0

    run_id = getattr(args, "run_id", None)
    infos = storage.list(run_id=run_id, all_runs=run_id is None)
    if not infos:
        print(f"No artifacts under {config.artifacts_root}")
        return 0
    now = utc_now()
    for info in infos:
        state = "expired" if info.is_expired(now) else f"expires {info.expires_at.isoformat()}"
        print(f"{info.run_id}  {info.name:<20} {len(info.files):>4} file(s)  {state}")
    return 0
