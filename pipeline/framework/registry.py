from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from memreport.errors import ActionInputError

from .context import JobContext
from .store import StepStore

ActionFunc = Callable[[JobContext, StepStore, Mapping[str, str]], Optional[Dict[str, Any]]]


@dataclass(frozen=True)
class ActionInput:
    name: str
    required: bool = False
    default: Optional[str] = None
    description: str = ""


@dataclass(frozen=True)
class ActionDefinition:
    """Metadata describing a registered action.

    ``inputs`` is the contract of a ``uses:`` step's ``with:`` block:

    - missing required inputs fail the step before the action runs
    - defaults are filled in for optional inputs
    - unknown inputs are reported as warnings (like a hosted runner does)
    """

    key: str
    func: ActionFunc
    description: str = ""
    inputs: Tuple[ActionInput, ...] = ()

    def resolve_inputs(self, given: Mapping[str, str], store: StepStore) -> Dict[str, str]:
        known = {i.name for i in self.inputs}
        for k in given:
            if k not in known:
                store.add_warning(f"{self.key}: unexpected input '{k}'")

        out: Dict[str, str] = {}
        missing: List[str] = []
        for spec in self.inputs:
            if spec.name in given and given[spec.name] != "":
                out[spec.name] = given[spec.name]
            elif spec.required:
                missing.append(spec.name)
            elif spec.default is not None:
                out[spec.name] = spec.default
        if missing:
            raise ActionInputError(f"{self.key}: missing required inputs {missing}")
        return out


_ACTION_REGISTRY: Dict[str, ActionDefinition] = {}


def register_action(
    key: str,
    *,
    description: str = "",
    inputs: Sequence[ActionInput] | None = None,
):
    """Decorator to register an action under the ``uses:`` key *key*."""

    def _decorator(fn: ActionFunc) -> ActionFunc:
        _ACTION_REGISTRY[key] = ActionDefinition(
            key=key,
            func=fn,
            description=description,
            inputs=tuple(inputs or ()),
        )
        return fn

    return _decorator


def get_action(key: str) -> ActionDefinition:
    if key not in _ACTION_REGISTRY:
        raise ActionInputError(f"Unknown action: {key}")
    return _ACTION_REGISTRY[key]


def list_actions() -> List[ActionDefinition]:
    return sorted(_ACTION_REGISTRY.values(), key=lambda a: a.key)


def input_flag(value: Optional[str]) -> bool:
    """Read a boolean action input (``true``/``false``, case-insensitive)."""

    return str(value or "").strip().lower() in {"true", "1", "yes", "on"}


def input_lines(value: Optional[str]) -> List[str]:
    """Read a multi-line (or comma-separated) action input."""

    out: List[str] = []
    for line in str(value or "").splitlines():
        out.extend(p.strip() for p in line.split(",") if p.strip())
    return out
