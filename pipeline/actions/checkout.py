from __future__ import annotations

from typing import Any, Dict, Mapping

from pipeline.framework import ActionInput, JobContext, StepStore, register_action
from tools.checkout import copy_source_tree, detect_git_commit


@register_action(
    "actions/checkout",
    description="Copy the source tree into the job workspace",
    inputs=[ActionInput("path", default="", description="Sub-directory of the workspace to check out into")],
)
def checkout(ctx: JobContext, store: StepStore, inputs: Mapping[str, str]) -> Dict[str, Any]:
    source = ctx.config.source_dir
    commit = detect_git_commit(source)

    if ctx.config.checkout_mode == "in-place" and not inputs.get("path"):
        print(f"  using {source} in place")
        return {"commit": commit or "", "path": str(source)}

    dest = ctx.workspace / inputs["path"] if inputs.get("path") else ctx.workspace
    copy_source_tree(source, dest)
    print(f"  {source} -> {dest}" + (f" @ {commit[:12]}" if commit else ""))
    return {"commit": commit or "", "path": str(dest)}
