from __future__ import annotations

import logging
import os
import traceback
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from memreport.errors import StepFailed

from pipeline.core import SHELL_CMD
from pipeline.models import StepSpec
from tools.core_cmd import run_cmd

from .command_files import CommandFiles, parse_key_values, parse_paths
from .context import JobContext
from .expressions import interpolate, resolve_value
from .registry import get_action
from .results import CANCELLED, FAILURE, SKIPPED, SUCCESS, JobResult, StepResult, now_iso
from .store import StepStore

logger = logging.getLogger(__name__)


def base_env(ctx: JobContext) -> Dict[str, str]:
    """Process env plus the variables every step of a job sees."""

    env = dict(os.environ)
    # never inherit another runner's command files
    for k in ("GITHUB_OUTPUT", "GITHUB_ENV", "GITHUB_PATH", "GITHUB_STEP_SUMMARY"):
        env.pop(k, None)
    env.update(
        {
            "CI": "true",
            "GITHUB_WORKSPACE": str(ctx.workspace),
            "GITHUB_EVENT_NAME": ctx.event.event_name,
            "GITHUB_REF": ctx.event.ref,
            "GITHUB_SHA": ctx.event.sha,
            "GITHUB_REPOSITORY": ctx.event.repository or "",
            "GITHUB_JOB": ctx.job.key,
            "RUNNER_TEMP": str(ctx.temp_dir),
            "MEMREPORT_RUN_ID": ctx.run_id,
        }
    )
    return env


def step_env(ctx: JobContext, store: StepStore, step: Optional[StepSpec] = None) -> Dict[str, str]:
    """Environment for one step: base env, job exports, step ``env:``, PATH prepends."""

    extra: Dict[str, str] = {}
    if step is not None:
        extra = {k: resolve_value(v, ctx, store) for k, v in step.env.items()}
    return store.build_env(base_env(ctx), extra)


def _run_shell_step(
    ctx: JobContext,
    store: StepStore,
    step: StepSpec,
    index: int,
    log_path: Path,
) -> Dict[str, str]:
    script = interpolate(step.run or "", ctx, store)

    cwd = ctx.workspace
    if step.working_directory:
        cwd = ctx.workspace / interpolate(step.working_directory, ctx, store)
    if not cwd.is_dir():
        raise StepFailed(f"working-directory not found: {cwd}")

    files = CommandFiles.create(ctx.temp_dir / "_runner_file_commands", index)
    env = step_env(ctx, store, step)
    env.update(files.as_env())

    res = run_cmd([*SHELL_CMD, script], cwd=cwd, env=env, log_path=log_path, quiet=ctx.quiet)
    if not res.ok:
        raise StepFailed(f"Process completed with exit code {res.exit_code}.", exit_code=res.exit_code)

    for d in parse_paths(files.path.read_text(encoding="utf-8")):
        p = Path(d)
        store.add_path(str(p if p.is_absolute() else (cwd / p)))
    for k, v in parse_key_values(files.env.read_text(encoding="utf-8"), source="GITHUB_ENV").items():
        store.export_env(k, v)
    return parse_key_values(files.output.read_text(encoding="utf-8"), source="GITHUB_OUTPUT")


def _run_action_step(ctx: JobContext, store: StepStore, step: StepSpec) -> Dict[str, str]:
    defn = get_action(step.uses or "")
    given = {str(k): resolve_value(v, ctx, store) for k, v in step.with_.items()}
    inputs = defn.resolve_inputs(given, store)
    outputs = defn.func(ctx, store, inputs) or {}
    return {str(k): v for k, v in outputs.items()}


def _execute_step(ctx: JobContext, store: StepStore, step: StepSpec, index: int, log_path: Path) -> Dict[str, Any]:
    if step.uses:
        return _run_action_step(ctx, store, step)
    return _run_shell_step(ctx, store, step, index, log_path)


def _append_log(log_path: Path, text: str) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(text)


def _run_post_hooks(store: StepStore, result: JobResult, *, job_ok: bool) -> None:
    """Run post hooks in reverse order. A failing hook is a warning, never a job failure."""

    for name, hook in reversed(store.post_hooks):
        sr = StepResult(name=f"Post {name}", status=SUCCESS, started_at=now_iso())
        try:
            hook(job_ok)
        except Exception as e:
            sr.status = FAILURE
            sr.error = str(e)
            store.add_warning(f"post:{name}: {e}")
            print(f"  ⚠️  Post {name} failed: {e}")
        sr.finished_at = now_iso()
        result.steps.append(sr)


def run_job(ctx: JobContext, *, store: Optional[StepStore] = None) -> JobResult:
    """Run the steps of one job instance, strictly in order.

    The first failing step fails the job and every later step is skipped.
    Steps whose condition is false are skipped without failing anything.
    ``KeyboardInterrupt`` cancels the in-flight step; the job comes back with
    status ``cancelled`` and post hooks are not run.
    """
    store = store or StepStore()
    result = JobResult(
        job_id=ctx.job_id,
        job_key=ctx.job.key,
        status=SUCCESS,
        matrix=dict(ctx.matrix),
        started_at=now_iso(),
    )

    ctx.workspace.mkdir(parents=True, exist_ok=True)
    ctx.temp_dir.mkdir(parents=True, exist_ok=True)
    print(f"\n=== Job: {ctx.job.name or ctx.job.key} ({ctx.job_id}) ===")

    failed = False
    cancelled = False
    try:
        for k, v in ctx.job.env.items():
            store.export_env(k, resolve_value(v, ctx, store))
    except Exception as e:
        failed = True
        result.reason = f"job env: {e}"
        store.add_error(f"job env: {e}")
        print(f"  ❌ job env: {e}")

    for index, step in enumerate(ctx.job.steps, start=1):
        label = step.label
        if failed or cancelled:
            result.steps.append(StepResult(name=label, id=step.id, status=SKIPPED))
            continue
        if step.condition is not None and not step.condition.evaluate(ctx.event):
            print(f"⏭  {label} (skipped: {step.condition.expr})")
            result.steps.append(StepResult(name=label, id=step.id, status=SKIPPED))
            continue

        log_path = ctx.paths.step_log(ctx.job_id, index, label)
        sr = StepResult(name=label, id=step.id, status=SUCCESS, started_at=now_iso())
        try:
            sr.log = str(log_path.relative_to(ctx.paths.run_dir))
        except ValueError:
            sr.log = str(log_path)

        print(f"▶ {label}")
        store.current_log = log_path
        try:
            outputs = _execute_step(ctx, store, step, index, log_path)
            if step.id:
                for k, v in outputs.items():
                    store.set_output(step.id, k, v)
                sr.outputs = dict(store.outputs.get(step.id, {}))
        except KeyboardInterrupt:
            sr.status = CANCELLED
            sr.error = "cancelled"
            cancelled = True
            print(f"  🛑 {label}: cancelled")
        except Exception as e:
            sr.status = FAILURE
            sr.error = str(e)
            failed = True
            store.add_error(f"step:{label}: {e}")
            _append_log(log_path, traceback.format_exc(limit=20))
            logger.debug("step %s failed", label, exc_info=True)
            print(f"  ❌ {label}: {e}")
        sr.finished_at = now_iso()
        result.steps.append(sr)

    if cancelled:
        result.status = CANCELLED
    else:
        result.status = FAILURE if failed else SUCCESS
        _run_post_hooks(store, result, job_ok=not failed)

    result.finished_at = now_iso()
    result.warnings = list(store.warnings)
    result.errors = list(store.errors)
    icon = {SUCCESS: "✅", FAILURE: "❌", CANCELLED: "🛑"}.get(result.status, "•")
    print(f"{icon} Job {ctx.job_id}: {result.status}")
    return result
