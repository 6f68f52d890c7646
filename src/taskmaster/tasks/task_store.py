# src/taskmaster/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import uuid
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .task_models import (
    FIELD_NAMES,
    Task,
    TaskPatch,
    TaskPriority,
    TaskStatus,
    parse_timestamp,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

_FAR_FUTURE = datetime.max.replace(tzinfo=UTC)


class TaskNotFoundError(LookupError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} not found")
        self.task_id = task_id


class TaskStore:
    """
    JSON-file task store.

    Two collections, each persisted as one pretty-printed JSON document:
    - active tasks:    {"tasks": [...]}
    - completed tasks: {"completed_tasks": [...]}, append-only

    Every mutation rewrites the whole affected file. A failed save is logged
    and the in-memory collections are kept as they are, so memory may be ahead
    of disk until the next successful save.
    """

    def __init__(
        self,
        tasks_path: str | Path = "tasks.json",
        completed_path: str | Path = "completed.json",
        reports_dir: str | Path = "reports",
    ) -> None:
        self._tasks_path = Path(tasks_path)
        self._completed_path = Path(completed_path)
        self._reports_dir = Path(reports_dir)

        self._tasks: list[Task] = self._load(self._tasks_path, "tasks")
        self._completed: list[Task] = self._load(self._completed_path, "completed_tasks")
        logger.info(
            "TaskStore ready tasks=%s active=%d completed=%d",
            self._tasks_path,
            len(self._tasks),
            len(self._completed),
        )

    # ---- persistence ----

    @staticmethod
    def _load(path: Path, key: str) -> list[Task]:
        if not path.exists():
            logger.debug("No %s file at %s; starting empty.", key, path)
            return []
        try:
            data = json.loads(path.read_text("utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            raw_items = data.get(key) or []
            return [Task.from_dict(item) for item in raw_items if isinstance(item, dict)]
        except (OSError, ValueError, TypeError) as e:
            logger.error("Error loading %s from %s: %s", key, path, e)
            return []

    @staticmethod
    def _save(path: Path, key: str, tasks: list[Task]) -> bool:
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            payload = {key: [t.to_dict() for t in tasks]}
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, path)
            return True
        except OSError as e:
            logger.error("Error saving %s to %s: %s", key, path, e)
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            return False

    def _save_tasks(self) -> bool:
        return self._save(self._tasks_path, "tasks", self._tasks)

    def _save_completed(self) -> bool:
        return self._save(self._completed_path, "completed_tasks", self._completed)

    def _index_of(self, task_id: str) -> int:
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                return idx
        raise TaskNotFoundError(task_id)

    # ---- CRUD ----

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def completed_tasks(self) -> list[Task]:
        return list(self._completed)

    def create_task(self, **fields: Any) -> Task:
        """
        Add a task built from `fields`. The generated id/created/updated
        always win; keys that are not Task attributes are kept in `extra`.
        Nothing is validated.
        """
        now = utc_now_iso()
        for key in ("id", "created", "updated", "completed"):
            fields.pop(key, None)
        extra = {k: fields.pop(k) for k in list(fields) if k not in FIELD_NAMES}
        task = Task(id=str(uuid.uuid4()), created=now, updated=now, extra=extra, **fields)

        self._tasks.append(task)
        self._save_tasks()
        logger.debug("Task created id=%s priority=%s", task.id, task.priority)
        return task

    def get_task(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        idx = self._index_of(task_id)
        updated = patch.apply(self._tasks[idx], updated=utc_now_iso())
        self._tasks[idx] = updated
        self._save_tasks()
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(patch.changes()))
        return updated

    def complete_task(self, task_id: str) -> Task:
        idx = self._index_of(task_id)
        now = utc_now_iso()
        snapshot = TaskPatch(status=TaskStatus.COMPLETED.value).apply(self._tasks[idx], updated=now)
        snapshot.completed = now

        self._completed.append(snapshot)
        del self._tasks[idx]

        self._save_tasks()
        self._save_completed()
        logger.info("Task completed id=%s", task_id)
        return snapshot

    def delete_task(self, task_id: str) -> Task:
        idx = self._index_of(task_id)
        removed = self._tasks.pop(idx)
        self._save_tasks()
        logger.info("Task deleted id=%s", task_id)
        return removed

    def block_task(self, task_id: str, reason: str) -> Task:
        task = self.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return self.update_task(
            task_id,
            TaskPatch(
                status=TaskStatus.BLOCKED.value,
                notes=f"{task.notes or ''}\n[BLOCKED]: {reason}",
            ),
        )

    def list_tasks(
        self,
        *,
        category: str | None = None,
        priority: str | None = None,
        status: str | None = None,
    ) -> list[Task]:
        out = list(self._tasks)
        if category:
            out = [t for t in out if t.category == category]
        if priority:
            out = [t for t in out if t.priority == priority]
        if status:
            out = [t for t in out if t.status == status]
        return out

    # ---- focus engine ----

    def get_focus_task(self) -> Task | None:
        """
        Pick the single best next task.

        Candidates: not Blocked, and no dependency that is still an active,
        non-completed task. Dependency ids that are unknown (deleted, completed
        or never existed) do not block.

        Order: priority rank, then tasks with a deadline before tasks without,
        earlier deadline first; without deadlines, earlier creation first.
        """
        open_ids = {t.id for t in self._tasks if t.status != TaskStatus.COMPLETED}

        candidates = [
            t
            for t in self._tasks
            if t.status != TaskStatus.BLOCKED
            and not any(dep in open_ids for dep in (t.dependencies or []))
        ]
        if not candidates:
            return None

        # min() keeps the first of equal keys, like a stable sort.
        return min(candidates, key=_focus_key)

    # ---- reporting ----

    def generate_report(self) -> Path | None:
        now = utc_now_iso()
        report_path = self._reports_dir / f"report-{now.split('T')[0]}.json"

        report = {
            "date": now,
            "total_tasks": len(self._tasks),
            "completed_tasks": len(self._completed),
            "tasks_by_status": dict(Counter(t.status for t in self._tasks)),
            "tasks_by_category": dict(Counter(t.category for t in self._tasks)),
            "tasks_by_priority": dict(Counter(t.priority for t in self._tasks)),
        }

        try:
            self._reports_dir.mkdir(parents=True, exist_ok=True)
            report_path.write_text(json.dumps(report, ensure_ascii=False, indent=2), "utf-8")
        except OSError as e:
            logger.error("Error generating report %s: %s", report_path, e)
            return None

        logger.info("Report written to %s", report_path)
        return report_path


def _focus_key(task: Task) -> tuple[int, int, datetime]:
    rank = TaskPriority.rank(task.priority)
    if task.deadline:
        return rank, 0, parse_timestamp(task.deadline) or _FAR_FUTURE
    return rank, 1, parse_timestamp(task.created) or _FAR_FUTURE
