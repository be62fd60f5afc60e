"""Markdown table helpers shared by the report renderers (no file I/O)."""

from __future__ import annotations

from typing import List, Sequence


NEW_MARK = "new"
NEW_FOOTNOTE = "_new_: not in the baseline report."


def _cell(value: str) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    lines: List[str] = []
    lines.append("| " + " | ".join(_cell(h) for h in headers) + " |")
    lines.append("| " + " | ".join("---" for _ in headers) + " |")
    for row in rows:
        lines.append("| " + " | ".join(_cell(c) for c in row) + " |")
    return "\n".join(lines)


def format_change(old: float, new: float) -> str:
    """Relative change as ``+1.50%`` / ``-0.25%`` / ``0.00%``."""

    if old == 0:
        return "0.00%" if new == 0 else "+inf%"
    pct = (new - old) / old * 100.0
    if abs(pct) < 0.005:
        return "0.00%"
    return f"{pct:+.2f}%"
