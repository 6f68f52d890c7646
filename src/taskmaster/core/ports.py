# src/taskmaster/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the command layer.

Commands depend on Protocols instead of concrete implementations, so tests can
drive them with a scripted console and an in-memory store.
"""

from pathlib import Path
from typing import Any, Protocol


class Console(Protocol):
    """Line-oriented terminal: one blocking prompt at a time."""

    def ask(self, prompt: str) -> str: ...
    def say(self, text: str) -> None: ...


class TaskRepo(Protocol):
    def create_task(self, **fields: Any) -> Any: ...
    def get_task(self, task_id: str) -> Any | None: ...
    def update_task(self, task_id: str, patch: Any) -> Any: ...
    def complete_task(self, task_id: str) -> Any: ...
    def delete_task(self, task_id: str) -> Any: ...
    def block_task(self, task_id: str, reason: str) -> Any: ...
    def list_tasks(
        self,
        *,
        category: str | None = None,
        priority: str | None = None,
        status: str | None = None,
    ) -> list[Any]: ...
    def get_focus_task(self) -> Any | None: ...
    def generate_report(self) -> Path | None: ...


class SuggestionSource(Protocol):
    def generate_task_suggestions(self) -> list[Any]: ...
