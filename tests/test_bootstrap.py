# tests/test_bootstrap.py

from __future__ import annotations

from taskmaster.analysis.project_analyzer import ProjectAnalyzer
from taskmaster.cli.bootstrap import create_initial_state
from taskmaster.tasks.task_store import TaskStore


def test_create_initial_state_wires_store_and_analyzer(settings) -> None:
    state = create_initial_state(settings=settings)

    assert settings.data_dir.is_dir()
    assert isinstance(state.task_store, TaskStore)
    assert isinstance(state.analyzer, ProjectAnalyzer)
    assert state.analyzer.project_root == settings.project_root.resolve()

    task = state.task_store.create_task(title="wired")
    assert settings.tasks_path.exists()
    assert state.task_store.get_task(task.id) == task
