"""tools/artifacts.py

Run-scoped artifact storage (the upload/download collaborator).

Layout::

    <root>/<run_id>/<name>/artifact.json
    <root>/<run_id>/<name>/files/<relative paths...>

An artifact is written once per run and name. It can be downloaded any number
of times until ``expires_at``; after that :meth:`ArtifactStorage.download`
raises :class:`~memreport.errors.ArtifactExpiredError` and
:meth:`ArtifactStorage.purge_expired` deletes it.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from memreport.errors import ArtifactConflictError, ArtifactExpiredError, ArtifactNotFoundError
from memreport.io import read_json_object, safe_name, write_json_atomic

logger = logging.getLogger(__name__)

MIN_RETENTION_DAYS = 1
MAX_RETENTION_DAYS = 90
DEFAULT_RETENTION_DAYS = 90

METADATA_NAME = "artifact.json"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ArtifactInfo:
    name: str
    run_id: str
    created_at: datetime
    expires_at: datetime
    retention_days: int
    files: tuple[str, ...]
    path: Path

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    @staticmethod
    def from_metadata(data: dict, path: Path) -> "ArtifactInfo":
        return ArtifactInfo(
            name=str(data["name"]),
            run_id=str(data["run_id"]),
            created_at=datetime.fromisoformat(str(data["created_at"])),
            expires_at=datetime.fromisoformat(str(data["expires_at"])),
            retention_days=int(data["retention_days"]),
            files=tuple(str(f) for f in data.get("files") or ()),
            path=path,
        )


def expand_upload_paths(base_dir: Path, patterns: Iterable[str]) -> List[Path]:
    """Resolve ``path:`` patterns (one per line, globs allowed) under *base_dir*.

    Directories are included recursively. Result is sorted and de-duplicated.
    """

    base = Path(base_dir)
    found: set[Path] = set()
    for raw in patterns:
        pat = str(raw).strip()
        if not pat:
            continue
        if pat.startswith("./"):
            pat = pat[2:]
        for p in base.glob(pat):
            if p.is_dir():
                found.update(q for q in p.rglob("*") if q.is_file())
            elif p.is_file():
                found.add(p)
    return sorted(found)


def _common_root(files: Sequence[Path]) -> Path:
    """Least common ancestor directory; files are stored relative to it."""

    parents = [f.parent.resolve() for f in files]
    root = parents[0]
    for p in parents[1:]:
        while root != p and root not in p.parents:
            root = root.parent
    return root


class ArtifactStorage:
    """Filesystem artifact store scoped to one run id."""

    def __init__(self, root: Path, run_id: str, *, clock: Clock = utc_now) -> None:
        self.root = Path(root)
        self.run_id = str(run_id)
        self._clock = clock

    def _artifact_dir(self, name: str, run_id: Optional[str] = None) -> Path:
        return self.root / safe_name(run_id or self.run_id) / safe_name(name)

    def upload(self, name: str, files: Sequence[Path], *, retention_days: int) -> ArtifactInfo:
        """Store *files* under artifact *name* for this run."""

        if not files:
            raise ValueError(f"Artifact '{name}' has no files to upload")
        days = int(retention_days)
        if not MIN_RETENTION_DAYS <= days <= MAX_RETENTION_DAYS:
            raise ValueError(
                f"retention-days must be between {MIN_RETENTION_DAYS} and {MAX_RETENTION_DAYS}, got {days}"
            )

        adir = self._artifact_dir(name)
        if (adir / METADATA_NAME).exists():
            raise ArtifactConflictError(f"Artifact '{name}' was already uploaded in run {self.run_id}")

        root = _common_root([Path(f) for f in files])
        files_dir = adir / "files"
        rel_files: List[str] = []
        for f in files:
            rel = Path(f).resolve().relative_to(root)
            dest = files_dir / rel
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(f, dest)
            rel_files.append(rel.as_posix())

        created = self._clock()
        meta = {
            "name": name,
            "run_id": self.run_id,
            "created_at": created.isoformat(),
            "expires_at": (created + timedelta(days=days)).isoformat(),
            "retention_days": days,
            "files": sorted(rel_files),
        }
        write_json_atomic(adir / METADATA_NAME, meta)
        logger.info("uploaded artifact %s (%d files) to %s", name, len(rel_files), adir)
        return ArtifactInfo.from_metadata(meta, adir)

    def info(self, name: str, *, run_id: Optional[str] = None) -> ArtifactInfo:
        adir = self._artifact_dir(name, run_id)
        meta = read_json_object(adir / METADATA_NAME)
        if meta is None:
            raise ArtifactNotFoundError(
                f"Artifact '{name}' not found for run {run_id or self.run_id} (under {self.root})"
            )
        return ArtifactInfo.from_metadata(meta, adir)

    def download(self, name: str, dest: Path, *, run_id: Optional[str] = None) -> List[Path]:
        """Copy the artifact's files into *dest* (created if needed)."""

        info = self.info(name, run_id=run_id)
        if info.is_expired(self._clock()):
            raise ArtifactExpiredError(
                f"Artifact '{name}' of run {info.run_id} expired at {info.expires_at.isoformat()}"
            )

        out: List[Path] = []
        dest = Path(dest)
        for rel in info.files:
            src = info.path / "files" / rel
            if not src.is_file():
                raise ArtifactNotFoundError(f"Artifact '{name}' is missing file {rel}")
            target = dest / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, target)
            out.append(target)
        return out

    def list(self, *, run_id: Optional[str] = None, all_runs: bool = False) -> List[ArtifactInfo]:
        run_dirs: List[Path]
        if all_runs:
            run_dirs = sorted(d for d in self.root.glob("*") if d.is_dir()) if self.root.exists() else []
        else:
            run_dirs = [self.root / safe_name(run_id or self.run_id)]

        out: List[ArtifactInfo] = []
        for rdir in run_dirs:
            for meta_path in sorted(rdir.glob(f"*/{METADATA_NAME}")):
                meta = read_json_object(meta_path)
                if meta is not None:
                    out.append(ArtifactInfo.from_metadata(meta, meta_path.parent))
        return out

    def latest_run_id(self, name: Optional[str] = None) -> Optional[str]:
        """Newest run id that stored an artifact (named *name*, when given)."""

        runs = {info.run_id for info in self.list(all_runs=True) if name is None or info.name == name}
        return max(runs) if runs else None

    def purge_expired(self) -> List[ArtifactInfo]:
        """Delete every expired artifact across all runs; return what was removed."""

        now = self._clock()
        removed: List[ArtifactInfo] = []
        for info in self.list(all_runs=True):
            if info.is_expired(now):
                shutil.rmtree(info.path)
                removed.append(info)
                run_dir = info.path.parent
                if run_dir.exists() and not any(run_dir.iterdir()):
                    run_dir.rmdir()
        return removed
