# pipeline/core.py
from __future__ import annotations

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]

# Shell used for `run` steps (same flags as a hosted runner's bash default).
SHELL_CMD = ("bash", "--noprofile", "--norc", "-e", "-o", "pipefail", "-c")

# Exit codes of a workflow run.
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130
