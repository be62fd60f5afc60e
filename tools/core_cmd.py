"""tools/core_cmd.py

Command-execution helpers shared by the runner and the actions.

This module deliberately avoids workflow knowledge. It provides:

* :func:`which_or_raise` - resolve executables reliably across environments.
* :func:`run_cmd` - run a subprocess (no ``shell=True``), stream its output to
  the console and tee it into a log file.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

# Lines kept in memory for error messages; the full output goes to the log.
TAIL_LINES = 40


@dataclass(frozen=True)
class CmdResult:
    exit_code: int
    elapsed_seconds: float
    command_str: str
    output_tail: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def which_or_raise(
    bin_name: str,
    fallbacks: Optional[List[str]] = None,
    *,
    path: Optional[str] = None,
) -> str:
    """Locate an executable and return its absolute path.

    *path* overrides ``$PATH`` for the lookup (job env PATH, for example).
    """
    found = shutil.which(bin_name, path=path)
    if found:
        return found

    for candidate in fallbacks or []:
        p = Path(candidate).expanduser()
        if p.exists() and os.access(str(p), os.X_OK):
            return str(p)

    raise FileNotFoundError(
        f"Executable '{bin_name}' not found on PATH.\n"
        f"Install it and ensure it's available to this process.\n"
        f"Tried fallbacks: {fallbacks or []}"
    )


def run_cmd(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
    log_path: Optional[Path] = None,
    quiet: bool = False,
) -> CmdResult:
    """Run a subprocess with stdout+stderr merged.

    Output is streamed line by line to stdout (unless *quiet*) and appended to
    *log_path* when given. *env* replaces the process environment entirely.

    Never raises on non-zero exit codes; raises on execution errors (binary not
    found). ``KeyboardInterrupt`` terminates the child before
    propagating.
    """
    t0 = time.time()
    tail: deque[str] = deque(maxlen=TAIL_LINES)

    log_f = None
    if log_path is not None:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        log_f = Path(log_path).open("a", encoding="utf-8")

    try:
        proc = subprocess.Popen(
            list(cmd),
            cwd=str(cwd) if cwd else None,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
        try:
            assert proc.stdout is not None
            for line in proc.stdout:
                tail.append(line.rstrip("\n"))
                if log_f is not None:
                    log_f.write(line)
                if not quiet:
                    sys.stdout.write(line)
            exit_code = proc.wait()
        except BaseException:
            if proc.poll() is None:
                proc.terminate()
                try:
                    proc.wait(timeout=10)
                except subprocess.TimeoutExpired:
                    proc.kill()
            raise
    finally:
        if log_f is not None:
            log_f.close()

    return CmdResult(
        exit_code=int(exit_code),
        elapsed_seconds=time.time() - t0,
        command_str=" ".join(cmd),
        output_tail="\n".join(tail),
    )
