# src/taskmaster/tasks/task_models.py

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Final

logger = logging.getLogger(__name__)


class TaskStatus(StrEnum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    COMPLETED = "Completed"
    BLOCKED = "Blocked"


class TaskPriority(StrEnum):
    """Priorities in focus order (first = most urgent)."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def rank(cls, raw: str | None) -> int:
        """
        Sort rank used by the focus engine.
        Unknown or missing priorities rank after Low.
        """
        for idx, member in enumerate(cls):
            if raw == member:
                return idx
        return len(cls)


# Suggested categories; the store accepts any string.
CATEGORIES: Final[tuple[str, ...]] = (
    "UI",
    "Backend",
    "Database",
    "Testing",
    "Deployment",
    "Documentation",
    "Refactoring",
    "Optimization",
)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a 'Z' suffix."""
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return format_timestamp(datetime.now(UTC))


def parse_timestamp(raw: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp or date. Naive values are taken as UTC.
    Returns None for empty or malformed input.
    """
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        logger.debug("Unparseable timestamp %r", raw)
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


@dataclass(slots=True)
class Task:
    id: str
    created: str
    updated: str

    title: str = ""
    description: str = ""
    category: str | None = None
    priority: str | None = None
    status: str = TaskStatus.PENDING.value
    deadline: str | None = None
    dependencies: list[str] = field(default_factory=list)
    subtasks: list[Any] = field(default_factory=list)
    notes: str = ""

    completed: str | None = None

    # Keys this version does not know about; written back unchanged on save.
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        extra = d.pop("extra")
        if d["completed"] is None:
            del d["completed"]
        for key, value in extra.items():
            d.setdefault(key, value)
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        data: dict[str, Any] = {k: v for k, v in raw.items() if k in FIELD_NAMES}
        extra = {k: v for k, v in raw.items() if k not in FIELD_NAMES}
        if extra:
            logger.debug("Keeping unknown task keys %s (id=%s)", sorted(extra), raw.get("id"))
        data["extra"] = extra
        data.setdefault("id", "")
        data.setdefault("created", "")
        data.setdefault("updated", data["created"])
        # JSON null for list fields would break dependency checks.
        if data.get("dependencies") is None:
            data["dependencies"] = []
        if data.get("subtasks") is None:
            data["subtasks"] = []
        return cls(**data)


# Stored Task attributes, i.e. everything except the `extra` bag.
FIELD_NAMES: Final[frozenset[str]] = frozenset(f.name for f in fields(Task)) - {"extra"}


class _Unset:
    """Marker for TaskPatch fields the caller did not set."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True, slots=True)
class TaskPatch:
    """
    Partial update for a Task.

    Only fields that were explicitly set are applied, and each one replaces the
    stored value entirely (lists are not merged). `None` is a real value here:
    TaskPatch(deadline=None) clears the deadline.
    """

    title: str | _Unset = UNSET
    description: str | _Unset = UNSET
    category: str | None | _Unset = UNSET
    priority: str | None | _Unset = UNSET
    status: str | _Unset = UNSET
    deadline: str | None | _Unset = UNSET
    dependencies: list[str] | _Unset = UNSET
    subtasks: list[Any] | _Unset = UNSET
    notes: str | _Unset = UNSET

    def changes(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def apply(self, task: Task, *, updated: str) -> Task:
        changes = self.changes()
        for key in ("dependencies", "subtasks"):
            if key in changes:
                changes[key] = list(changes[key])
        return replace(task, **changes, updated=updated, extra=dict(task.extra))


@dataclass(slots=True)
class Suggestion:
    """A proto-task produced by the project analyzer; not persisted."""

    title: str
    description: str
    category: str
    priority: str
    notes: str
    status: str = TaskStatus.PENDING.value

    def as_task_fields(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
            "status": self.status,
            "notes": self.notes,
        }
