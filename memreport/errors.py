"""memreport.errors

Exception taxonomy for the pipeline.

Every failure a workflow run can hit maps to one class here. The job runner
turns any of them into a failed step; nothing is retried.
"""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for every error raised by the pipeline."""


class WorkflowDefinitionError(PipelineError):
    """The workflow objects are inconsistent (unknown needs, cycles, ...)."""


class ExpressionError(PipelineError):
    """A ``${{ ... }}`` expression could not be resolved."""


class ActionInputError(PipelineError):
    """A ``uses`` step is missing a required input or names an unknown action."""


class StepFailed(PipelineError):
    """A ``run`` step exited with a non-zero code."""

    def __init__(self, message: str, *, exit_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class BuildError(StepFailed):
    """Compilation or toolchain provisioning failed."""


class MeasurementError(StepFailed):
    """The measurement script failed or did not produce its report file."""


class ArtifactError(PipelineError):
    """Base class for artifact transfer problems."""


class ArtifactNotFoundError(ArtifactError):
    """No artifact with the requested name exists for the run."""


class ArtifactExpiredError(ArtifactError):
    """The artifact existed but its retention window has passed."""


class ArtifactConflictError(ArtifactError):
    """An artifact with the same name was already uploaded in this run."""


class ReportFormatError(PipelineError):
    """The report file is missing or does not match the expected schema."""


class CommentPublishError(PipelineError):
    """Publishing the pull-request comment failed (permissions, API error)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
