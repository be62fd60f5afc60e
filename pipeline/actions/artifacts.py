from __future__ import annotations

from typing import Any, Dict, Mapping

from pipeline.framework import ActionInput, JobContext, StepStore, input_lines, register_action
from tools.artifacts import DEFAULT_RETENTION_DAYS, expand_upload_paths

IF_NO_FILES_FOUND = ("warn", "error", "ignore")


@register_action(
    "artifact/upload",
    description="Publish workspace files as a named artifact of this run",
    inputs=[
        ActionInput("name", default="artifact"),
        ActionInput("path", required=True),
        ActionInput("retention-days", default=str(DEFAULT_RETENTION_DAYS)),
        ActionInput("if-no-files-found", default="warn"),
    ],
)
def upload(ctx: JobContext, store: StepStore, inputs: Mapping[str, str]) -> Dict[str, Any]:
    name = inputs["name"]
    policy = inputs["if-no-files-found"].strip().lower()
    if policy not in IF_NO_FILES_FOUND:
        raise ValueError(f"if-no-files-found must be one of {IF_NO_FILES_FOUND}, got {policy!r}")

    files = expand_upload_paths(ctx.workspace, input_lines(inputs["path"]))
    if not files:
        msg = f"No files were found with the provided path: {inputs['path']}. No artifacts will be uploaded."
        if policy == "error":
            raise FileNotFoundError(msg)
        if policy == "warn":
            store.add_warning(msg)
            print(f"  ⚠️  {msg}")
        return {"artifact-name": name, "files": 0}

    info = ctx.services.artifacts.upload(name, files, retention_days=int(inputs["retention-days"]))
    print(f"  uploaded '{name}' ({len(info.files)} files), expires {info.expires_at.isoformat()}")
    return {"artifact-name": name, "files": len(info.files)}


@register_action(
    "artifact/download",
    description="Fetch a named artifact into the workspace",
    inputs=[
        ActionInput("name", required=True),
        ActionInput("path", default="."),
    ],
)
def download(ctx: JobContext, store: StepStore, inputs: Mapping[str, str]) -> Dict[str, Any]:
    dest = (ctx.workspace / inputs["path"]).resolve()
    files = ctx.services.artifacts.download(inputs["name"], dest, run_id=ctx.artifacts_run_id)
    print(f"  downloaded '{inputs['name']}' ({len(files)} files) -> {dest}")
    return {"download-path": str(dest)}
