from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

SUCCESS = "success"
FAILURE = "failure"
SKIPPED = "skipped"
CANCELLED = "cancelled"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class StepResult:
    """Execution record for one step."""

    name: str
    status: str
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    id: Optional[str] = None
    outputs: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    log: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "id": self.id,
            "status": self.status,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "outputs": dict(self.outputs),
            "error": self.error,
            "log": self.log,
        }


@dataclass
class JobResult:
    """Execution record for one job instance."""

    job_id: str
    job_key: str
    status: str
    matrix: Mapping[str, Any] = field(default_factory=dict)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    steps: List[StepResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    def step(self, name_or_id: str) -> StepResult:
        for s in self.steps:
            if s.id == name_or_id or s.name == name_or_id:
                return s
        raise KeyError(f"No step {name_or_id!r} in job {self.job_id}")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "job_key": self.job_key,
            "status": self.status,
            "matrix": dict(self.matrix),
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "reason": self.reason,
            "steps": [s.as_dict() for s in self.steps],
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }
