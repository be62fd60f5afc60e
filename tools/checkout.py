"""tools/checkout.py

Source checkout into a job workspace (the checkout collaborator).

Each job gets its own copy of the source tree so jobs never see each other's
build outputs; only artifacts cross job boundaries.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence

# Never copied into a job workspace.
DEFAULT_IGNORES = (".git", "target", "dist", "__pycache__", ".venv", "runs")


def copy_source_tree(
    source_dir: Path,
    workspace: Path,
    *,
    ignore: Sequence[str] = DEFAULT_IGNORES,
) -> Path:
    """Copy *source_dir* into *workspace* (which may already exist and be empty)."""

    src = Path(source_dir).resolve()
    if not src.is_dir():
        raise FileNotFoundError(f"Source directory not found: {src}")
    dest = Path(workspace)
    if dest.resolve() == src:
        return dest
    shutil.copytree(src, dest, ignore=shutil.ignore_patterns(*ignore), symlinks=True, dirs_exist_ok=True)
    return dest


def detect_git_commit(repo_path: Optional[Path]) -> Optional[str]:
    """Best-effort detect the current git commit SHA for a checkout."""

    if not repo_path:
        return None
    try:
        out = subprocess.check_output(
            ["git", "-C", str(repo_path), "rev-parse", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=20,
        ).strip()
        return out or None
    except (OSError, subprocess.SubprocessError):
        return None


def detect_git_branch(repo_path: Optional[Path]) -> Optional[str]:
    """Best-effort detect the checked-out branch (None when detached)."""

    if not repo_path:
        return None
    try:
        out = subprocess.check_output(
            ["git", "-C", str(repo_path), "rev-parse", "--abbrev-ref", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=20,
        ).strip()
    except (OSError, subprocess.SubprocessError):
        return None
    if not out or out == "HEAD":
        return None
    return out
