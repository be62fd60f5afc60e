"""memreport.io

Filesystem contracts and IO helpers.

The run layout is a public contract: the CLI, the runner and the tests all
locate manifests, logs and workspaces through :mod:`memreport.io.layout`.
"""

from __future__ import annotations

from .fs import read_json, read_json_object, write_json_atomic, write_text_atomic
from .layout import RUN_ID_RE, RunPaths, create_run_dir, prepare_run_paths, safe_name

__all__ = [
    "RUN_ID_RE",
    "RunPaths",
    "create_run_dir",
    "prepare_run_paths",
    "read_json",
    "read_json_object",
    "safe_name",
    "write_json_atomic",
    "write_text_atomic",
]
