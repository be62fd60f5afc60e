"""memreport.io.fs

Atomic filesystem writers.

Run manifests, artifact metadata and the local comment store are all rewritten
in place by later steps. Writing them through one helper keeps the formatting
stable (diff-friendly) and guarantees a reader never sees a half-written file
if a run is cancelled mid-write.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO


def _atomic_write(
    path: Path,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> None:
    """Write a file by writing a sibling temp file and ``os.replace()``-ing it."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f"{p.name}.", suffix=".tmp", dir=str(p.parent))
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, p)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def write_text_atomic(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """Write text atomically."""

    _atomic_write(Path(path), lambda f: f.write(text), encoding=encoding)


def write_json_atomic(
    path: Path,
    data: Any,
    *,
    indent: int = 2,
    sort_keys: bool = True,
) -> None:
    """Write JSON atomically with stable formatting and a trailing newline."""

    def _write(f: TextIO) -> None:
        json.dump(data, f, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
        f.write("\n")

    _atomic_write(Path(path), _write)


def read_json(path: Path, *, encoding: str = "utf-8") -> Any:
    """Read JSON from disk (raises on missing file or invalid JSON)."""

    with Path(path).open("r", encoding=encoding) as f:
        return json.load(f)


def read_json_object(path: Path) -> Optional[Dict[str, Any]]:
    """Read a JSON object, returning None when the file is missing.

    Invalid JSON or a non-object top level still raises ``ValueError``: a
    corrupt metadata file should stop the caller, not look like "absent".
    """

    p = Path(path)
    if not p.is_file():
        return None
    data = read_json(p)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {p}, got {type(data).__name__}")
    return data

