"""tools.bench_report

Benchmark report parsing and markdown rendering (the report-formatting
collaborator).

Two report kinds are understood:

* memory reports: ``{"memory_reports": [{"artifact_name", "peak_memory"}]}``
* gates reports: ``{"programs": [{"package_name", "functions": [...]}]}``
"""

from .gates import GatesEntry, load_gates_report, render_gates_markdown
from .memory import MemoryEntry, format_size, load_memory_report, parse_size, render_memory_markdown

__all__ = [
    "GatesEntry",
    "MemoryEntry",
    "format_size",
    "load_gates_report",
    "load_memory_report",
    "parse_size",
    "render_gates_markdown",
    "render_memory_markdown",
]
