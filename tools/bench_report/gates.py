"""tools/bench_report/gates.py

Gates (circuit size) report schema and rendering, used when the parse action
runs without ``memory_report: true``::

    {"programs": [
        {"package_name": "keccak256",
         "functions": [{"name": "main", "acir_opcodes": 2864, "circuit_size": 55712}]}
    ]}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from memreport.errors import ReportFormatError

from .table import NEW_FOOTNOTE, NEW_MARK, format_change, render_table


@dataclass(frozen=True)
class GatesEntry:
    package_name: str
    function: str
    acir_opcodes: int
    circuit_size: int

    @property
    def key(self) -> str:
        return self.package_name if self.function == "main" else f"{self.package_name}::{self.function}"


def _as_int(value: object, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ReportFormatError(f"{what} must be a number, got {value!r}")
    return int(value)


def load_gates_report(path: Path) -> List[GatesEntry]:
    p = Path(path)
    if not p.is_file():
        raise ReportFormatError(f"Gates report not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ReportFormatError(f"Gates report is not valid JSON: {p}: {e}") from e

    programs = data.get("programs") if isinstance(data, dict) else None
    if not isinstance(programs, list):
        raise ReportFormatError(f"{p}: expected an object with a 'programs' list")

    out: List[GatesEntry] = []
    for prog in programs:
        if not isinstance(prog, dict) or not isinstance(prog.get("package_name"), str):
            raise ReportFormatError(f"{p}: every program needs a package_name")
        name = prog["package_name"]
        for fn in prog.get("functions") or []:
            if not isinstance(fn, dict):
                raise ReportFormatError(f"{p}: {name}: function entries must be objects")
            out.append(
                GatesEntry(
                    package_name=name,
                    function=str(fn.get("name") or "main"),
                    acir_opcodes=_as_int(fn.get("acir_opcodes"), f"{name}.acir_opcodes"),
                    circuit_size=_as_int(fn.get("circuit_size"), f"{name}.circuit_size"),
                )
            )
    return out


def render_gates_markdown(
    entries: Sequence[GatesEntry],
    *,
    header: str = "",
    previous: Optional[Sequence[GatesEntry]] = None,
) -> str:
    base = {e.key: e for e in previous} if previous is not None else None

    headers = ["Program", "ACIR opcodes", "Circuit size"]
    if base is not None:
        headers += ["% opcodes", "% size"]

    rows: List[List[str]] = []
    for e in sorted(entries, key=lambda x: x.key):
        row = [e.key, str(e.acir_opcodes), str(e.circuit_size)]
        if base is not None:
            old = base.get(e.key)
            if old is None:
                row += [NEW_MARK, NEW_MARK]
            else:
                row += [
                    format_change(old.acir_opcodes, e.acir_opcodes),
                    format_change(old.circuit_size, e.circuit_size),
                ]
        rows.append(row)

    parts: List[str] = []
    if header.strip():
        parts += [header.strip(), ""]
    parts.append(render_table(headers, rows) if rows else "_No programs._")
    if base is not None and any(r[-1] == NEW_MARK for r in rows):
        parts += ["", NEW_FOOTNOTE]
    return "\n".join(parts) + "\n"
