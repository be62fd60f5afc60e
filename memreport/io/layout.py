"""memreport.io.layout

Canonical on-disk layout of a workflow run.

::

    <runs_root>/<run_id>/
        run.json                     run manifest
        logs/<job_id>/<NN>_<step>.log
        jobs/<job_id>/workspace/     isolated job workspace
        jobs/<job_id>/temp/          runner.temp + step command files

Job ids include the matrix suffix, e.g. ``build-nargo-x86_64-unknown-linux-gnu``.
Nothing else in the repo should invent its own paths for these files.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple, Union

# YYYYMMDDNNHHMMSS: UTC date, per-day sequence, UTC time
RUN_ID_RE = re.compile(r"^\d{16}$")

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def safe_name(value: str) -> str:
    """Filesystem-safe fragment (job ids, step names, artifact names)."""

    s = _UNSAFE.sub("-", str(value).strip()).strip("-.")
    return s or "unnamed"


def create_run_dir(runs_root: Union[str, Path]) -> Tuple[str, Path]:
    """Create a new ``YYYYMMDDNNHHMMSS`` run directory under *runs_root*.

    NN is a per-day sequence number derived from existing run dirs; if a
    directory with the candidate id already exists (another process), NN is
    incremented until creation succeeds.
    """

    root = Path(runs_root)
    root.mkdir(parents=True, exist_ok=True)

    now = datetime.now(timezone.utc)
    today = now.strftime("%Y%m%d")
    hhmmss = now.strftime("%H%M%S")

    existing: List[int] = []
    for d in root.iterdir():
        if d.is_dir() and RUN_ID_RE.match(d.name) and d.name.startswith(today):
            existing.append(int(d.name[8:10]))

    idx = (max(existing) if existing else 0) + 1
    while True:
        run_id = f"{today}{idx:02d}{hhmmss}"
        run_dir = root / run_id
        try:
            run_dir.mkdir(parents=True, exist_ok=False)
            return run_id, run_dir
        except FileExistsError:
            idx += 1


@dataclass(frozen=True)
class RunPaths:
    """Paths for one workflow run."""

    run_id: str
    run_dir: Path

    @property
    def manifest(self) -> Path:
        return self.run_dir / "run.json"

    @property
    def logs_dir(self) -> Path:
        return self.run_dir / "logs"

    def job_dir(self, job_id: str) -> Path:
        return self.run_dir / "jobs" / safe_name(job_id)

    def job_workspace(self, job_id: str) -> Path:
        return self.job_dir(job_id) / "workspace"

    def job_temp(self, job_id: str) -> Path:
        return self.job_dir(job_id) / "temp"

    def step_log(self, job_id: str, index: int, step_name: str) -> Path:
        return self.logs_dir / safe_name(job_id) / f"{index:02d}_{safe_name(step_name)}.log"


def prepare_run_paths(runs_root: Union[str, Path]) -> RunPaths:
    """Allocate a new run directory and return its :class:`RunPaths`."""

    run_id, run_dir = create_run_dir(runs_root)
    return RunPaths(run_id=run_id, run_dir=run_dir)
