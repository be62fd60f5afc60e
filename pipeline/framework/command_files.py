"""pipeline.framework.command_files

Step command files: how a ``run`` script talks back to the runner.

Before a shell step starts, three empty files are created and exported as
``GITHUB_OUTPUT``, ``GITHUB_ENV`` and ``GITHUB_PATH``. After it exits:

* ``GITHUB_PATH``: one directory per line, prepended to PATH for later steps
* ``GITHUB_ENV``: ``NAME=value`` lines exported to later steps
* ``GITHUB_OUTPUT``: ``key=value`` lines become ``steps.<id>.outputs.<key>``

Both key/value files also accept the multi-line form::

    key<<DELIMITER
    line 1
    line 2
    DELIMITER
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from memreport.errors import StepFailed


@dataclass(frozen=True)
class CommandFiles:
    output: Path
    env: Path
    path: Path

    @staticmethod
    def create(directory: Path, index: int) -> "CommandFiles":
        d = Path(directory)
        d.mkdir(parents=True, exist_ok=True)
        files = CommandFiles(
            output=d / f"output_{index:02d}",
            env=d / f"env_{index:02d}",
            path=d / f"path_{index:02d}",
        )
        for p in (files.output, files.env, files.path):
            p.write_text("", encoding="utf-8")
        return files

    def as_env(self) -> Dict[str, str]:
        return {
            "GITHUB_OUTPUT": str(self.output),
            "GITHUB_ENV": str(self.env),
            "GITHUB_PATH": str(self.path),
        }


def parse_key_values(text: str, *, source: str = "command file") -> Dict[str, str]:
    out: Dict[str, str] = {}
    lines = text.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if not line.strip():
            continue
        if "<<" in line and ("=" not in line or line.index("<<") < line.index("=")):
            key, delim = line.split("<<", 1)
            key, delim = key.strip(), delim.strip()
            if not key or not delim:
                raise StepFailed(f"Invalid multi-line entry in {source}: {line!r}")
            body: List[str] = []
            while i < len(lines) and lines[i] != delim:
                body.append(lines[i])
                i += 1
            if i >= len(lines):
                raise StepFailed(f"Unterminated {key}<<{delim} block in {source}")
            i += 1
            out[key] = "\n".join(body)
            continue
        if "=" not in line:
            raise StepFailed(f"Invalid line in {source}: {line!r}")
        key, value = line.split("=", 1)
        out[key.strip()] = value
    return out


def parse_paths(text: str) -> List[str]:
    return [ln.strip() for ln in text.splitlines() if ln.strip()]
