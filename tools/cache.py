"""tools/cache.py

Directory cache for build outputs (the dependency-cache collaborator).

Entries live under ``<root>/<key>/``. A save replaces the entry atomically
(copy to a temp dir, then rename), so a cancelled save never leaves a
half-written entry behind for the next restore.
"""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, Optional, Sequence

from memreport.io import safe_name

logger = logging.getLogger(__name__)

# Files whose content decides whether a cached target/ is still useful.
RUST_KEY_FILES = ("Cargo.lock", "rust-toolchain", "rust-toolchain.toml")


def hash_files(base_dir: Path, names: Iterable[str], *, extra: Sequence[str] = ()) -> str:
    """Short stable hash over the named files (missing files are skipped) and *extra* strings."""

    h = hashlib.sha256()
    base = Path(base_dir)
    for name in names:
        p = base / name
        if p.is_file():
            h.update(name.encode("utf-8"))
            h.update(p.read_bytes())
    for s in extra:
        h.update(str(s).encode("utf-8"))
    return h.hexdigest()[:20]


def rust_cache_key(
    *,
    job_key: str,
    user_key: str,
    workspace: Path,
    toolchain: Optional[str] = None,
    prefix: str = "v0-rust",
) -> tuple[str, str]:
    """Return ``(full_key, restore_prefix)``.

    The restore prefix omits the content hash, so a stale entry for the same
    job/key can still be restored when Cargo.lock changed.
    """
    restore_prefix = "-".join(p for p in (prefix, job_key, user_key) if p)
    digest = hash_files(workspace, RUST_KEY_FILES, extra=[toolchain or ""])
    return f"{restore_prefix}-{digest}", restore_prefix


class DirectoryCache:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _entry(self, key: str) -> Path:
        return self.root / safe_name(key)

    def lookup(self, key: str, *, restore_prefix: Optional[str] = None) -> Optional[Path]:
        """Exact entry for *key*, else the newest entry starting with *restore_prefix*."""

        exact = self._entry(key)
        if exact.is_dir():
            return exact
        if not restore_prefix or not self.root.is_dir():
            return None
        prefix = safe_name(restore_prefix)
        candidates = [d for d in self.root.iterdir() if d.is_dir() and d.name.startswith(prefix) and ".tmp-" not in d.name]
        if not candidates:
            return None
        return max(candidates, key=lambda d: d.stat().st_mtime)

    def restore(self, key: str, dest: Path, *, restore_prefix: Optional[str] = None) -> Optional[str]:
        """Copy a cached entry into *dest*. Returns the matched key (or None on miss)."""

        entry = self.lookup(key, restore_prefix=restore_prefix)
        if entry is None:
            return None
        shutil.copytree(entry, dest, dirs_exist_ok=True, symlinks=True)
        logger.info("cache restored %s -> %s", entry.name, dest)
        return entry.name

    def save(self, key: str, src: Path) -> Path:
        src = Path(src)
        if not src.is_dir():
            raise FileNotFoundError(f"Nothing to cache: {src} is not a directory")

        self.root.mkdir(parents=True, exist_ok=True)
        final = self._entry(key)
        tmp = self.root / f"{final.name}.tmp-{os.getpid()}"
        if tmp.exists():
            shutil.rmtree(tmp)
        try:
            shutil.copytree(src, tmp, symlinks=True)
            if final.exists():
                shutil.rmtree(final)
            os.replace(tmp, final)
            # copytree copied the source mtime; restore-by-prefix picks the newest save
            os.utime(final)
        finally:
            if tmp.exists():
                shutil.rmtree(tmp, ignore_errors=True)
        logger.info("cache saved %s -> %s", src, final)
        return final
