"""Entity store: an in-memory working set of days, tasks and completions.

Mutations only touch memory. ``save()`` hands a full snapshot to the backend,
which either persists all of it or raises StorageFailure with nothing
written. Callers see the error; the working set is left as it was.
"""

from __future__ import annotations

import copy
import logging
from decimal import InvalidOperation
from pathlib import Path
from typing import Any, Callable, Iterable

from points.errors import StorageFailure
from points.fileio import read_yaml, write_yaml_atomic
from points.models import Completion, Day, Snapshot, Task

logger = logging.getLogger(__name__)


# ── Backends ──────────────────────────────────────────────────


class MemoryBackend:
    """Keeps the last saved snapshot as a plain dict. Used by tests."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = copy.deepcopy(data) if data else {}
        self.saves = 0

    def load(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)

    def write(self, data: dict[str, Any]) -> None:
        self.data = copy.deepcopy(data)
        self.saves += 1


class YamlBackend:
    """Snapshot persisted to a single YAML file with atomic replace."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, Any]:
        return read_yaml(self.path)

    def write(self, data: dict[str, Any]) -> None:
        write_yaml_atomic(self.path, data)


# ── Store ─────────────────────────────────────────────────────


class EntityStore:
    def __init__(self, backend: MemoryBackend | YamlBackend | None = None) -> None:
        self.backend = backend if backend is not None else MemoryBackend()
        self.days: dict[str, Day] = {}
        self.tasks: dict[str, Task] = {}
        self.completions: dict[str, Completion] = {}
        self.reload()

    def reload(self) -> None:
        """Replace the working set with what the backend holds."""
        try:
            snapshot = Snapshot.from_dict(self.backend.load())
        except (OSError, ValueError, TypeError, InvalidOperation) as e:
            raise StorageFailure(f"Cannot load store: {e}") from e
        self.days = {d.key: d for d in snapshot.days}
        self.tasks = {t.id: t for t in snapshot.tasks}
        self.completions = {c.id: c for c in snapshot.completions}

    def snapshot(self) -> Snapshot:
        return Snapshot(
            days=sorted(self.days.values(), key=lambda d: d.key),
            tasks=list(self.tasks.values()),
            completions=list(self.completions.values()),
        )

    def save(self) -> None:
        """Persist every pending change at once, or raise StorageFailure."""
        data = self.snapshot().to_dict()
        try:
            self.backend.write(data)
        except StorageFailure as e:
            logger.error("store_save_failed error=%s", e)
            raise
        except OSError as e:
            logger.error("store_save_failed error=%s", e)
            raise StorageFailure(f"Cannot save store: {e}") from e

    # ── Days ──────────────────────────────────────────────────

    def get_day(self, key: str) -> Day | None:
        return self.days.get(key)

    def add_day(self, day: Day) -> Day:
        self.days[day.key] = day
        return day

    def discard_day(self, key: str) -> None:
        """Forget an unsaved Day, e.g. after its first save failed."""
        self.days.pop(key, None)

    # ── Tasks ─────────────────────────────────────────────────

    def get_task(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)

    def add_task(self, task: Task) -> Task:
        self.tasks[task.id] = task
        return task

    def fetch_tasks(self, predicate: Callable[[Task], bool] | None = None) -> list[Task]:
        if predicate is None:
            return list(self.tasks.values())
        return [t for t in self.tasks.values() if predicate(t)]

    def count_tasks(self, predicate: Callable[[Task], bool]) -> int:
        return sum(1 for t in self.tasks.values() if predicate(t))

    def remove_task(self, task: Task) -> None:
        """Drop a task and its completion records from the working set."""
        self.tasks.pop(task.id, None)
        for cid in [c.id for c in self.completions.values() if c.task_id == task.id]:
            del self.completions[cid]

    def remove_tasks(self, tasks: Iterable[Task]) -> None:
        for task in list(tasks):
            self.remove_task(task)

    # ── Completions ───────────────────────────────────────────

    def add_completion(self, completion: Completion) -> Completion:
        self.completions[completion.id] = completion
        return completion

    def fetch_completions(self, predicate: Callable[[Completion], bool] | None = None) -> list[Completion]:
        if predicate is None:
            return list(self.completions.values())
        return [c for c in self.completions.values() if predicate(c)]
