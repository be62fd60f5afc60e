"""tools/bench_report/memory.py

Peak-memory report schema and markdown rendering.

The measurement script writes::

    {"memory_reports": [
        {"artifact_name": "keccak256", "peak_memory": "74.59M"},
        ...
    ]}

``peak_memory`` is heaptrack's size string: a number with an optional
``K``/``M``/``G``/``T`` (or ``B``) unit. A bare number is read as megabytes.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from memreport.errors import ReportFormatError

from .table import NEW_FOOTNOTE, NEW_MARK, format_change, render_table

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*([BKMGT]?)(?:i?B)?\s*$", re.IGNORECASE)

_UNIT_BYTES: Dict[str, int] = {
    "B": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
    "T": 1024**4,
}


def parse_size(raw: str) -> float:
    """``"74.59M"`` -> bytes. Raises ValueError for anything else."""

    m = _SIZE_RE.match(str(raw))
    if not m:
        raise ValueError(f"Not a memory size: {raw!r}")
    value = float(m.group(1))
    unit = (m.group(2) or "M").upper()
    return value * _UNIT_BYTES[unit]


def format_size(num_bytes: float) -> str:
    """Bytes -> the shortest heaptrack-style string (``1.23G``, ``512.00K``)."""

    for unit in ("T", "G", "M", "K"):
        scale = _UNIT_BYTES[unit]
        if abs(num_bytes) >= scale:
            return f"{num_bytes / scale:.2f}{unit}"
    return f"{num_bytes:.0f}B"


@dataclass(frozen=True)
class MemoryEntry:
    """Peak memory of one test program."""

    artifact_name: str
    peak_memory: str
    peak_bytes: float


def _entries_from_data(data: object, source: str) -> List[MemoryEntry]:
    if not isinstance(data, dict) or "memory_reports" not in data:
        raise ReportFormatError(f"{source}: expected an object with a 'memory_reports' list")
    rows = data["memory_reports"]
    if not isinstance(rows, list):
        raise ReportFormatError(f"{source}: 'memory_reports' must be a list")

    out: List[MemoryEntry] = []
    seen: set[str] = set()
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ReportFormatError(f"{source}: memory_reports[{i}] is not an object")
        name = row.get("artifact_name")
        peak = row.get("peak_memory")
        if not isinstance(name, str) or not name.strip():
            raise ReportFormatError(f"{source}: memory_reports[{i}] has no artifact_name")
        if isinstance(peak, (int, float)) and not isinstance(peak, bool):
            peak = str(peak)
        if not isinstance(peak, str):
            raise ReportFormatError(f"{source}: memory_reports[{i}] ({name}) has no peak_memory")
        try:
            peak_bytes = parse_size(peak)
        except ValueError as e:
            raise ReportFormatError(f"{source}: memory_reports[{i}] ({name}): {e}") from e
        if name in seen:
            raise ReportFormatError(f"{source}: duplicate artifact_name {name!r}")
        seen.add(name)
        out.append(MemoryEntry(artifact_name=name, peak_memory=peak.strip(), peak_bytes=peak_bytes))
    return out


def load_memory_report(path: Path) -> List[MemoryEntry]:
    """Load and validate a memory report file."""

    p = Path(path)
    if not p.is_file():
        raise ReportFormatError(f"Memory report not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ReportFormatError(f"Memory report is not valid JSON: {p}: {e}") from e
    return _entries_from_data(data, str(p))


def render_memory_markdown(
    entries: Sequence[MemoryEntry],
    *,
    header: str = "",
    previous: Optional[Sequence[MemoryEntry]] = None,
) -> str:
    """Render entries as a markdown table, sorted by program name.

    With *previous*, a ``%`` column shows the change against the baseline;
    programs missing from the baseline are marked ``new`` and explained in a
    footnote under the table.
    """

    ordered = sorted(entries, key=lambda e: e.artifact_name)
    base = {e.artifact_name: e for e in previous} if previous is not None else None

    headers = ["Program", "Peak Memory"]
    if base is not None:
        headers.append("%")

    rows: List[List[str]] = []
    for e in ordered:
        row = [e.artifact_name, e.peak_memory]
        if base is not None:
            old = base.get(e.artifact_name)
            row.append(format_change(old.peak_bytes, e.peak_bytes) if old else NEW_MARK)
        rows.append(row)

    parts: List[str] = []
    if header.strip():
        parts.append(header.strip())
        parts.append("")
    if rows:
        parts.append(render_table(headers, rows))
        if base is not None and any(r[-1] == NEW_MARK for r in rows):
            parts += ["", NEW_FOOTNOTE]
    else:
        parts.append("_No memory reports._")
    return "\n".join(parts) + "\n"
