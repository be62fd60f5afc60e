"""pipeline.framework.expressions

``${{ ... }}`` substitution for step inputs, env values and ``run`` scripts.

Only property lookups are supported (no operators): conditions are typed
:class:`~pipeline.models.Condition` objects, not strings. Supported roots::

    github.workspace  github.event_name  github.ref  github.sha
    github.repository github.run_id      github.job
    matrix.<axis>     steps.<id>.outputs.<key>
    env.<NAME>        runner.temp        runner.os
"""

from __future__ import annotations

import re
from typing import Any

from memreport.errors import ExpressionError

from pipeline.models import Condition

from .context import JobContext
from .store import StepStore

_EXPR_RE = re.compile(r"\$\{\{\s*(.*?)\s*\}\}")


def _github(ctx: JobContext, attr: str) -> Any:
    values = {
        "workspace": str(ctx.workspace),
        "event_name": ctx.event.event_name,
        "ref": ctx.event.ref,
        "sha": ctx.event.sha,
        "repository": ctx.event.repository or "",
        "run_id": ctx.run_id,
        "job": ctx.job.key,
    }
    if attr not in values:
        raise ExpressionError(f"Unknown expression: github.{attr}")
    return values[attr]


def lookup(path: str, ctx: JobContext, store: StepStore) -> Any:
    parts = path.split(".")
    root = parts[0]

    if root == "github" and len(parts) == 2:
        return _github(ctx, parts[1])
    if root == "matrix" and len(parts) == 2:
        if parts[1] not in ctx.matrix:
            raise ExpressionError(f"Unknown matrix axis: {parts[1]}")
        return ctx.matrix[parts[1]]
    if root == "steps" and len(parts) == 4 and parts[2] == "outputs":
        # Missing outputs resolve to "" (hosted runner semantics).
        return store.get_output(parts[1], parts[3], "")
    if root == "env" and len(parts) == 2:
        return store.env.get(parts[1], dict(ctx.job.env).get(parts[1], ""))
    if root == "runner" and len(parts) == 2:
        if parts[1] == "temp":
            return str(ctx.temp_dir)
        if parts[1] == "os":
            return "Linux"

    raise ExpressionError(f"Unknown expression: {path}")


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def interpolate(text: str, ctx: JobContext, store: StepStore) -> str:
    return _EXPR_RE.sub(lambda m: _as_text(lookup(m.group(1), ctx, store)), str(text))


def resolve_value(value: Any, ctx: JobContext, store: StepStore) -> str:
    """Resolve one ``with:``/``env:`` value to the string an action receives."""

    if isinstance(value, Condition):
        return _as_text(value.evaluate(ctx.event))
    if isinstance(value, str):
        return interpolate(value, ctx, store)
    return _as_text(value)
