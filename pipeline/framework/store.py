from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

# Called after all steps; the argument tells whether the job succeeded.
PostHook = Callable[[bool], None]


@dataclass
class StepStore:
    """Mutable state shared by the steps of one job.

    Steps should:
    - read inputs from ctx and from ``with:``
    - publish step outputs with :meth:`set_output`
    - change the environment of *later* steps only through :meth:`export_env`
      and :meth:`add_path`
    - register cleanup/save work as post hooks (run after all steps)
    """

    outputs: Dict[str, Dict[str, str]] = field(default_factory=dict)
    env: Dict[str, str] = field(default_factory=dict)
    path_prepends: List[str] = field(default_factory=list)
    post_hooks: List[Tuple[str, PostHook]] = field(default_factory=list)

    # log file of the step currently executing (actions append tool output here)
    current_log: Optional[Path] = None

    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def set_output(self, step_id: str, key: str, value: Any) -> None:
        self.outputs.setdefault(step_id, {})[str(key)] = _to_str(value)

    def get_output(self, step_id: str, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.outputs.get(step_id, {}).get(key, default)

    def export_env(self, name: str, value: Any) -> None:
        self.env[str(name)] = _to_str(value)

    def add_path(self, directory: str) -> None:
        d = str(directory).strip()
        if d and d not in self.path_prepends:
            self.path_prepends.insert(0, d)

    def add_post_hook(self, name: str, fn: PostHook) -> None:
        self.post_hooks.append((name, fn))

    def add_warning(self, message: str) -> None:
        self.warnings.append(str(message))

    def add_error(self, message: str) -> None:
        self.errors.append(str(message))

    def build_env(self, base: Mapping[str, str], *extra: Mapping[str, str]) -> Dict[str, str]:
        """Environment for the next step: *base*, job exports, *extra*, PATH prepends."""

        env = dict(base)
        env.update(self.env)
        for e in extra:
            env.update(e)
        if self.path_prepends:
            current = env.get("PATH", "")
            env["PATH"] = os.pathsep.join(self.path_prepends + ([current] if current else []))
        return env


def _to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
