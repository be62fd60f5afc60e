"""pipeline.wiring

This module is the **composition root** for the Python runtime.

"Composition root" means: the single place where we *assemble* the running
application from its building blocks:

- load configuration / environment variables
- choose real vs local implementations (GitHub API vs JSON comment store)
- build the high-level pipeline facade object

Keeping this wiring in one place prevents configuration and dependency setup
from being duplicated across entrypoints (CLI, scripts, CI).
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

from memreport.errors import CommentPublishError

from pipeline.config import CommentBackendFactory, RunnerConfig, RunServices
from pipeline.core import ROOT_DIR
from pipeline.events import EventContext
from pipeline.pipeline import MemoryReportPipeline
from tools.artifacts import ArtifactStorage
from tools.cache import DirectoryCache
from tools.github.api import GitHubClient
from tools.github.local_store import LocalCommentStore
from tools.github.types import CommentBackend, GitHubConfig

# Registers the builtin actions (side effect import).
import pipeline.actions  # noqa: F401

logger = logging.getLogger(__name__)

ENV_PATH: Path = ROOT_DIR / ".env"


def load_dotenv_if_present(dotenv_path: Path = ENV_PATH) -> bool:
    """Load ``.env`` without overriding variables already set in the shell."""

    if not dotenv_path.exists():
        return False
    return load_dotenv(dotenv_path, override=False)


def comment_backend_factory(config: RunnerConfig) -> CommentBackendFactory:
    """Local JSON store when ``comments_store`` is configured, GitHub otherwise.

    The GitHub client is built lazily, so runs that never publish a comment
    (push events) do not need a token.
    """

    def _factory(event: EventContext) -> CommentBackend:
        if config.comments_store is not None:
            logger.debug("sticky comments go to %s", config.comments_store)
            return LocalCommentStore(config.comments_store)
        try:
            cfg = GitHubConfig.from_env(repository=event.repository)
        except ValueError as e:
            raise CommentPublishError(str(e)) from e
        return GitHubClient(cfg)

    return _factory


def build_services(config: RunnerConfig, run_id: str) -> RunServices:
    return RunServices(
        artifacts=ArtifactStorage(config.artifacts_root, run_id),
        cache=DirectoryCache(config.cache_root),
        comments=comment_backend_factory(config),
    )


def build_pipeline(*, load_env: bool = True) -> MemoryReportPipeline:
    """Build the high-level pipeline facade."""

    if load_env:
        load_dotenv_if_present(ENV_PATH)
    return MemoryReportPipeline(services_factory=build_services)
