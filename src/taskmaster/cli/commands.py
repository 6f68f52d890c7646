# src/taskmaster/cli/commands.py

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable

from ..core.ports import Console
from ..core.state import AppState
from ..tasks.task_models import (
    CATEGORIES,
    Task,
    TaskPatch,
    TaskPriority,
    TaskStatus,
    format_timestamp,
    parse_timestamp,
)
from ..tasks.task_store import TaskNotFoundError

CommandHandler = Callable[[AppState, list[str], Console], str | None]

logger = logging.getLogger(__name__)

RE_FILTER = re.compile(
    r"(category|priority|status):(.*?)(?=\s+(?:category|priority|status):|$)",
    re.IGNORECASE,
)

CATEGORY_HINT = "\nCategories: " + ", ".join(CATEGORIES)
PRIORITY_HINT = "\nPriorities: " + ", ".join(TaskPriority)
STATUS_HINT = "\nStatus: " + ", ".join(TaskStatus)


class CommandRegistry:
    """Registry for `task <subcommand> [args]` lines typed into the console."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, tuple[str, str]] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        usage: str | None = None,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = (usage or key, help_text)
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, console: Console) -> str | None:
        """
        Dispatch one input line and return the text to print (None = nothing).

        Lines not starting with `task` get a hint; a missing or unknown
        subcommand shows the help. Not-found errors from the store come back
        as their message.
        """
        parts = line.strip().split()
        if not parts:
            return None

        if parts[0].lower() != "task":
            return 'Unknown command. Type "task help" for available commands.'

        name = parts[1].lower() if len(parts) > 1 else "help"
        args = parts[2:]

        handler = self._handlers.get(name)
        if handler is None:
            return self.build_help()

        try:
            return handler(state, args, console)
        except TaskNotFoundError as e:
            logger.debug("Command %s: %s", name, e)
            return str(e)

    def build_help(self) -> str:
        lines = ["Taskmaster Commands:"]
        for usage, help_text in self._help.values():
            lines.append(f"  task {usage:<40} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _dump(task: Task) -> str:
    return json.dumps(task.to_dict(), ensure_ascii=False, indent=2)


def _resolve_id(state: AppState, raw: str) -> str:
    """Accept a full id or a unique prefix of an active task id."""
    if state.task_store.get_task(raw) is not None:
        return raw
    matches = [t.id for t in state.task_store.list_tasks() if t.id.startswith(raw)]
    return matches[0] if len(matches) == 1 else raw


def _parse_filters(args: list[str]) -> dict[str, str]:
    filters: dict[str, str] = {}
    for m in RE_FILTER.finditer(" ".join(args)):
        filters[m.group(1).lower()] = m.group(2).strip()
    return filters


def _parse_deadline(raw: str) -> str | None:
    dt = parse_timestamp(raw)
    return format_timestamp(dt) if dt is not None else None


def _show_value(value: str | None) -> str:
    return value if value else "none"


def _show_deadline(deadline: str | None) -> str:
    dt = parse_timestamp(deadline)
    return dt.date().isoformat() if dt is not None else "none"


def _ask_optional(console: Console, prompt: str, current: str | None) -> str | None:
    """Empty input keeps `current`; 'none' clears."""
    raw = console.ask(prompt).strip()
    if not raw:
        return current
    return None if raw.lower() == "none" else raw


def _ask_deadline(console: Console, prompt: str, current: str | None) -> str | None:
    """Empty input keeps `current`; 'none' clears; invalid dates re-prompt."""
    while True:
        raw = console.ask(prompt).strip()
        if not raw:
            return current
        if raw.lower() == "none":
            return None
        deadline = _parse_deadline(raw)
        if deadline is not None:
            return deadline
        console.say(f"Invalid date: {raw!r}. Use YYYY-MM-DD.")


def _ask_dependencies(
    state: AppState, console: Console, prompt: str, current: list[str]
) -> list[str]:
    raw = console.ask(prompt).strip()
    if not raw:
        return list(current)
    if raw.lower() == "none":
        return []
    return [_resolve_id(state, part.strip()) for part in raw.split(",") if part.strip()]


# ---- commands ----


def cmd_help(state: AppState, args: list[str], console: Console) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], console: Console) -> str:
    """
    task list                         -> all active tasks
    task list priority:High           -> filtered (exact match)
    task list status:In Progress      -> values may contain spaces
    """
    tasks = state.task_store.list_tasks(**_parse_filters(args))
    if not tasks:
        return "No tasks found."

    by_status: dict[str, list[Task]] = {}
    for task in tasks:
        by_status.setdefault(str(task.status), []).append(task)

    lines: list[str] = []
    for status, group in by_status.items():
        lines.append(f"\n{status.upper()} ({len(group)}):")
        for task in group:
            lines.append(f"- [{task.id[:8]}] {task.title} ({task.priority})")
    return "\n".join(lines)


def cmd_create(state: AppState, args: list[str], console: Console) -> str:
    title = console.ask("Task title: ")
    description = console.ask("Task description: ")

    console.say(CATEGORY_HINT)
    category = console.ask("Task category: ")

    console.say(PRIORITY_HINT)
    priority = console.ask("Task priority: ")

    deadline = _ask_deadline(console, "Task deadline (YYYY-MM-DD or leave empty): ", None)
    dependencies = _ask_dependencies(
        state, console, "Depends on (comma-separated task ids, or leave empty): ", []
    )
    notes = console.ask("Additional notes: ")

    task = state.task_store.create_task(
        title=title,
        description=description,
        category=category,
        priority=priority,
        status=TaskStatus.PENDING.value,
        deadline=deadline,
        dependencies=dependencies,
        subtasks=[],
        notes=notes,
    )
    return f"\nTask created successfully:\n{_dump(task)}"


def cmd_update(state: AppState, args: list[str], console: Console) -> str:
    if not args:
        return "Please provide a task ID to update."
    raw_id = args[0]

    task_id = _resolve_id(state, raw_id)
    task = state.task_store.get_task(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)

    console.say(f"\nCurrent task:\n{_dump(task)}")
    console.say("\nLeave fields empty to keep current values.")

    title = console.ask(f"Title ({task.title}): ") or task.title
    description = console.ask(f"Description ({task.description}): ") or task.description

    console.say(CATEGORY_HINT)
    category = _ask_optional(console, f"Category ({_show_value(task.category)}): ", task.category)

    console.say(PRIORITY_HINT)
    priority = _ask_optional(console, f"Priority ({_show_value(task.priority)}): ", task.priority)

    console.say(STATUS_HINT)
    status = console.ask(f"Status ({task.status}): ") or task.status

    deadline = _ask_deadline(
        console, f"Deadline ({_show_deadline(task.deadline)}): ", task.deadline
    )
    deps_shown = ", ".join(task.dependencies) if task.dependencies else "none"
    dependencies = _ask_dependencies(
        state, console, f"Depends on ({deps_shown}): ", task.dependencies
    )
    notes = console.ask(f"Additional notes ({task.notes}): ") or task.notes

    updated = state.task_store.update_task(
        task_id,
        TaskPatch(
            title=title,
            description=description,
            category=category,
            priority=priority,
            status=status,
            deadline=deadline,
            dependencies=dependencies,
            notes=notes,
        ),
    )
    return f"\nTask updated successfully:\n{_dump(updated)}"


def cmd_complete(state: AppState, args: list[str], console: Console) -> str:
    if not args:
        return "Please provide a task ID to complete."
    raw_id = args[0]
    task = state.task_store.complete_task(_resolve_id(state, raw_id))
    return f'Task "{task.title}" marked as completed.'


def cmd_delete(state: AppState, args: list[str], console: Console) -> str:
    if not args:
        return "Please provide a task ID to delete."
    raw_id = args[0]
    task = state.task_store.delete_task(_resolve_id(state, raw_id))
    return f'Task "{task.title}" deleted.'


def cmd_blocked(state: AppState, args: list[str], console: Console) -> str:
    if not args:
        return "Please provide a task ID to mark as blocked."
    raw_id = args[0]
    reason = console.ask("Reason for blocking this task: ")
    task = state.task_store.block_task(_resolve_id(state, raw_id), reason)
    return f'Task "{task.title}" marked as blocked.'


def cmd_focus(state: AppState, args: list[str], console: Console) -> str:
    task = state.task_store.get_focus_task()
    if task is None:
        return "No available tasks to focus on."
    return f"\nRecommended task to focus on:\n{_dump(task)}"


def cmd_report(state: AppState, args: list[str], console: Console) -> str:
    path = state.task_store.generate_report()
    if path is None:
        return "Failed to generate report."
    return f"Report generated: {path}"


def cmd_analyze(state: AppState, args: list[str], console: Console) -> str | None:
    console.say("Analyzing project for task suggestions...")
    suggestions = state.analyzer.generate_task_suggestions()

    if not suggestions:
        return "No task suggestions found from code analysis."

    console.say(f"\nFound {len(suggestions)} potential tasks from code analysis:")
    for i, s in enumerate(suggestions, start=1):
        console.say(f"\n{i}. {s.title} ({s.category}, {s.priority})")
        console.say(f"   {s.description}")

    answer = console.ask("\nWould you like to add these suggestions to your tasks? (y/n): ")
    if answer.strip().lower() != "y":
        return None

    for s in suggestions:
        state.task_store.create_task(**s.as_task_fields())
    logger.info("Imported %d suggestions as tasks", len(suggestions))
    return f"Added {len(suggestions)} tasks from code analysis."


registry.register(
    "list",
    cmd_list,
    help_text="Display tasks grouped by status (filters combine)",
    usage="list [category:X] [priority:X] [status:X]",
)
registry.register("create", cmd_create, help_text="Create a new task")
registry.register("update", cmd_update, help_text="Update an existing task", usage="update [id]")
registry.register(
    "complete", cmd_complete, help_text="Mark a task as completed", usage="complete [id]"
)
registry.register("delete", cmd_delete, help_text="Remove a task", usage="delete [id]")
registry.register(
    "blocked", cmd_blocked, help_text="Mark a task as blocked", usage="blocked [id]"
)
registry.register("focus", cmd_focus, help_text="Recommend the next most important task")
registry.register("report", cmd_report, help_text="Generate progress report")
registry.register("analyze", cmd_analyze, help_text="Analyze code for task suggestions")
registry.register("help", cmd_help, help_text="Show this help message")
