"""pipeline.config

Runner configuration and the services handed to every job.

Precedence (highest first): CLI flags, environment (``MEMREPORT_*``, also
loaded from ``.env`` by :mod:`pipeline.wiring`), the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

from pipeline.core import ROOT_DIR
from pipeline.events import EventContext
from tools.artifacts import ArtifactStorage
from tools.cache import DirectoryCache
from tools.github.types import CommentBackend

CHECKOUT_MODES = ("copy", "in-place")


def _env_path(environ: Mapping[str, str], name: str, default: Path) -> Path:
    raw = environ.get(name)
    p = Path(raw).expanduser() if raw else default
    return p if p.is_absolute() else (ROOT_DIR / p)


@dataclass(frozen=True)
class RunnerConfig:
    """Where a run reads sources from and writes everything else to.

    Attributes
    ----------
    source_dir:
        Repository that ``actions/checkout`` copies into each job workspace.
    runs_root:
        Parent of run directories (manifest, logs, job workspaces).
    artifacts_root:
        Artifact storage shared by all runs (scoped by run id inside).
    cache_root:
        Build cache entries (``cache/rust``).
    checkout_mode:
        ``copy`` (isolated workspace per job) or ``in-place`` (jobs run
        directly in ``source_dir``).
    comments_store:
        When set, sticky comments go to this JSON file instead of GitHub.
    """

    source_dir: Path
    runs_root: Path
    artifacts_root: Path
    cache_root: Path
    checkout_mode: str = "copy"
    comments_store: Optional[Path] = None
    quiet: bool = False

    @staticmethod
    def from_env(
        environ: Mapping[str, str] = os.environ,
        *,
        source_dir: Optional[Path] = None,
    ) -> "RunnerConfig":
        runs_root = _env_path(environ, "MEMREPORT_RUNS_ROOT", ROOT_DIR / "runs")
        store = environ.get("MEMREPORT_COMMENTS_STORE")
        mode = environ.get("MEMREPORT_CHECKOUT_MODE", "copy")
        if mode not in CHECKOUT_MODES:
            raise ValueError(f"MEMREPORT_CHECKOUT_MODE must be one of {CHECKOUT_MODES}, got {mode!r}")
        return RunnerConfig(
            source_dir=Path(source_dir or environ.get("MEMREPORT_SOURCE_DIR") or Path.cwd()).resolve(),
            runs_root=runs_root,
            artifacts_root=_env_path(environ, "MEMREPORT_ARTIFACTS_ROOT", runs_root / "_artifacts"),
            cache_root=_env_path(environ, "MEMREPORT_CACHE_ROOT", runs_root / "_cache"),
            checkout_mode=mode,
            comments_store=Path(store).expanduser().resolve() if store else None,
        )


CommentBackendFactory = Callable[[EventContext], CommentBackend]


@dataclass(frozen=True)
class RunServices:
    """External collaborators available to actions during one run."""

    artifacts: ArtifactStorage
    cache: DirectoryCache
    comments: CommentBackendFactory
