# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskmaster.analysis.project_analyzer import ProjectAnalyzer
from taskmaster.core.state import AppState
from taskmaster.tasks.task_store import TaskStore

BIG_FUNCTION = "function big() {\n" + "  total += 1;\n" * 60 + "}\n"

DUPLICATED_BODY = (
    "{\n"
    "  const value = computeSomething(alpha, beta, gamma) + computeSomethingElse(delta, epsilon);\n"
    "  const other = value * factor;\n"
    "  return other;\n"
    "}"
)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any .env file.
    """
    data_dir = tmp_path / "data"
    project_root = tmp_path / "project"
    project_root.mkdir()
    return SimpleNamespace(
        app_name="Taskmaster",
        log_level="WARNING",
        data_dir=data_dir,
        tasks_path=data_dir / "tasks.json",
        completed_path=data_dir / "completed.json",
        reports_dir=data_dir / "reports",
        log_dir=data_dir,
        project_root=project_root,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_path, settings.completed_path, settings.reports_dir)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    """
    AppState wired with the real TaskStore and ProjectAnalyzer on tmp paths.
    """
    return AppState(
        settings=settings,
        task_store=store,
        analyzer=ProjectAnalyzer(settings.project_root),
    )


@pytest.fixture()
def sample_project(settings: SimpleNamespace) -> Path:
    """
    A small source tree:
      src/app.js   - TODO/FIXME comments and a hardcoded URL
      src/big.js   - one function over 50 lines
      src/dup.js   - the same large block twice
      tool.py      - a TODO without a colon
      notes.md, node_modules/, .taskmaster/ - must be ignored
    """
    root: Path = settings.project_root
    (root / "src").mkdir()
    (root / "src" / "app.js").write_text(
        "const items = [];\n"
        "// FIXME: broken TODO: also\n"
        "// TODO: add tests\n"
        "const TODOS = [];\n"
        'const endpoint = "https://example.com/api";\n',
        "utf-8",
    )
    (root / "src" / "big.js").write_text(BIG_FUNCTION, "utf-8")
    (root / "src" / "dup.js").write_text(
        f"function first() {DUPLICATED_BODY}\n\nfunction second() {DUPLICATED_BODY}\n",
        "utf-8",
    )
    (root / "tool.py").write_text("# TODO handle errors\nprint(1)\n", "utf-8")
    (root / "notes.md").write_text("TODO: not a source file\n", "utf-8")
    (root / "node_modules").mkdir()
    (root / "node_modules" / "lib.js").write_text("// TODO: vendored\n", "utf-8")
    (root / ".taskmaster").mkdir()
    (root / ".taskmaster" / "own.js").write_text("// FIXME: tool data\n", "utf-8")
    return root
