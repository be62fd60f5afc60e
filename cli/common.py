from __future__ import annotations

"""cli.common

Small shared helpers for CLI command modules.

The CLI is split by subcommand (run/format/comment/artifacts/export/jobs).
Building the runner config and the event from flags is needed by several of
them; keeping that here avoids subtle drift between subcommands.
"""

import argparse
import dataclasses
import logging
import os
from pathlib import Path
from typing import Optional

from pipeline.config import RunnerConfig
from pipeline.events import EventContext
from tools.checkout import detect_git_branch, detect_git_commit


def parse_csv(raw: Optional[str]) -> list[str]:
    """Parse a comma-separated list value into a list of non-empty strings."""
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _path(raw: Optional[str]) -> Optional[Path]:
    return Path(raw).expanduser().resolve() if raw else None


def config_from_args(args: argparse.Namespace) -> RunnerConfig:
    """Env-derived :class:`RunnerConfig` with CLI flags applied on top."""
    try:
        cfg = RunnerConfig.from_env(os.environ, source_dir=_path(getattr(args, "source_dir", None)))
    except ValueError as e:
        raise SystemExit(str(e))

    overrides = {}
    runs_root = _path(getattr(args, "runs_root", None))
    if runs_root is not None:
        overrides["runs_root"] = runs_root
        # derived roots follow --runs-root unless set explicitly
        if not os.environ.get("MEMREPORT_ARTIFACTS_ROOT"):
            overrides["artifacts_root"] = runs_root / "_artifacts"
        if not os.environ.get("MEMREPORT_CACHE_ROOT"):
            overrides["cache_root"] = runs_root / "_cache"
    for name in ("artifacts_root", "cache_root", "comments_store"):
        p = _path(getattr(args, name, None))
        if p is not None:
            overrides[name] = p
    if getattr(args, "checkout_mode", None):
        overrides["checkout_mode"] = args.checkout_mode
    if getattr(args, "quiet", False):
        overrides["quiet"] = True
    return dataclasses.replace(cfg, **overrides)


def event_from_args(args: argparse.Namespace, *, source_dir: Optional[Path] = None) -> EventContext:
    """Event from ``--from-github-env`` or the explicit event flags."""
    if args.from_github_env:
        try:
            return EventContext.from_env(os.environ)
        except ValueError as e:
            raise SystemExit(str(e))

    branch = args.branch
    if args.ref is None and branch is None and args.event not in ("pull_request", "pull_request_target"):
        branch = detect_git_branch(source_dir)
    if args.event in ("pull_request", "pull_request_target") and args.pr is None:
        raise SystemExit(f"--pr is required for --event {args.event}")

    return EventContext.local(
        args.event,
        branch=branch,
        ref=args.ref,
        sha=args.sha or detect_git_commit(source_dir) or "",
        repository=args.repository or os.environ.get("GITHUB_REPOSITORY") or None,
        pr_number=args.pr,
    )
