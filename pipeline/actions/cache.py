from __future__ import annotations

from typing import Any, Dict, Mapping

from pipeline.framework import ActionInput, JobContext, StepStore, input_flag, register_action
from tools.cache import rust_cache_key


@register_action(
    "cache/rust",
    description="Restore the cargo target directory and save it after the job",
    inputs=[
        ActionInput("key", default=""),
        ActionInput("cache-on-failure", default="false"),
        ActionInput("save-if", default="true"),
        ActionInput("path", default="target"),
    ],
)
def rust_cache(ctx: JobContext, store: StepStore, inputs: Mapping[str, str]) -> Dict[str, Any]:
    cache = ctx.services.cache
    target_dir = ctx.workspace / inputs["path"]
    key, restore_prefix = rust_cache_key(
        job_key=ctx.job.key,
        user_key=inputs.get("key", ""),
        workspace=ctx.workspace,
        toolchain=store.env.get("RUSTUP_TOOLCHAIN"),
    )

    matched = cache.restore(key, target_dir, restore_prefix=restore_prefix)
    hit = matched == key
    if matched:
        print(f"  restored {matched}" + ("" if hit else " (partial match)"))
    else:
        print(f"  no cache entry for {key}")

    cache_on_failure = input_flag(inputs.get("cache-on-failure"))
    if input_flag(inputs.get("save-if")):

        def _save(job_ok: bool) -> None:
            if not job_ok and not cache_on_failure:
                print("  job failed; not saving cache")
                return
            if not target_dir.is_dir():
                store.add_warning(f"cache/rust: {target_dir} does not exist, nothing saved")
                return
            cache.save(key, target_dir)
            print(f"  saved cache {key}")

        store.add_post_hook("cache/rust", _save)
    else:
        print("  save-if is false; cache will not be saved")

    return {"cache-hit": hit, "cache-key": key}
