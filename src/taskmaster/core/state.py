# src/taskmaster/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import SuggestionSource, TaskRepo


@dataclass
class AppState:
    # Settings are kept on the state so commands can read paths/app name.
    settings: object

    task_store: TaskRepo
    analyzer: SuggestionSource
