from __future__ import annotations

from typing import Any, Dict, Mapping

from pipeline.framework import ActionInput, JobContext, StepStore, input_lines, register_action, step_env
from tools.toolchain import install_rust_toolchain


@register_action(
    "toolchain/rust",
    description="Install a pinned Rust toolchain and select it for later steps",
    inputs=[
        ActionInput("toolchain", required=True),
        ActionInput("targets", default=""),
        ActionInput("components", default=""),
    ],
)
def setup_rust(ctx: JobContext, store: StepStore, inputs: Mapping[str, str]) -> Dict[str, Any]:
    toolchain = inputs["toolchain"].strip()
    version = install_rust_toolchain(
        toolchain,
        env=step_env(ctx, store),
        targets=input_lines(inputs.get("targets")),
        components=input_lines(inputs.get("components")),
        log_path=store.current_log,
        quiet=ctx.quiet,
    )
    store.export_env("RUSTUP_TOOLCHAIN", toolchain)
    print(f"  {version}")
    return {"name": toolchain, "rustc-version": version}
