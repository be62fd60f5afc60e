from __future__ import annotations

import argparse
import os

from pipeline.config import CHECKOUT_MODES
from pipeline.events import PULL_REQUEST_EVENTS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

EVENT_NAMES = ("push", "merge_group", "workflow_dispatch", *sorted(PULL_REQUEST_EVENTS))


def add_base_args(parser: argparse.ArgumentParser) -> None:
    """Register flags shared by every subcommand.

    Runner paths default to ``MEMREPORT_*`` env vars (see
    :meth:`pipeline.config.RunnerConfig.from_env`); flags override them.
    """

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=os.environ.get("MEMREPORT_LOG_LEVEL", "WARNING").upper(),
        help="Python logging level (default: MEMREPORT_LOG_LEVEL or WARNING).",
    )
    parser.add_argument("--runs-root", help="Parent directory of run directories (default: runs/).")
    parser.add_argument("--artifacts-root", help="Artifact storage root (default: <runs-root>/_artifacts).")
    parser.add_argument("--cache-root", help="Build cache root (default: <runs-root>/_cache).")
    parser.add_argument(
        "--comments-store",
        help="Publish sticky comments to this JSON file instead of the GitHub API.",
    )


def add_event_args(parser: argparse.ArgumentParser) -> None:
    """Flags describing the event a run (or comment) is for."""

    parser.add_argument(
        "--event",
        choices=EVENT_NAMES,
        default="push",
        help="Event name to simulate (default: push).",
    )
    ref = parser.add_mutually_exclusive_group()
    ref.add_argument("--ref", help="Full git ref, e.g. refs/heads/master.")
    ref.add_argument("--branch", help="Branch name (shorthand for --ref refs/heads/<branch>).")
    parser.add_argument("--sha", default="", help="Commit sha (default: detected from --source-dir).")
    parser.add_argument("--pr", type=int, help="Pull request number (pull_request events).")
    parser.add_argument("--repository", help="owner/name (default: GITHUB_REPOSITORY).")
    parser.add_argument(
        "--from-github-env",
        action="store_true",
        help="Read the event from GITHUB_EVENT_NAME / GITHUB_REF / GITHUB_EVENT_PATH instead.",
    )


def add_runner_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source-dir",
        help="Repository checked out into job workspaces (default: MEMREPORT_SOURCE_DIR or cwd).",
    )
    parser.add_argument(
        "--checkout-mode",
        choices=CHECKOUT_MODES,
        help="copy = isolated workspace per job, in-place = run inside --source-dir.",
    )
    parser.add_argument("--quiet", action="store_true", help="Do not echo step output (still logged).")
