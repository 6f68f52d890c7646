# src/taskmaster/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the concrete TaskStore and ProjectAnalyzer into AppState.
"""

from __future__ import annotations

import logging

from ..analysis.project_analyzer import ProjectAnalyzer
from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)
    settings.completed_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = AppState(
        settings=settings,
        task_store=TaskStore(
            settings.tasks_path,
            settings.completed_path,
            settings.reports_dir,
        ),
        analyzer=ProjectAnalyzer(settings.project_root),
    )
    logger.debug("State ready data_dir=%s project_root=%s", settings.data_dir, settings.project_root)
    return state
