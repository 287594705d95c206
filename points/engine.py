"""Tracker: one handle over a store, its settings and a notifier.

Everything the presentation layer needs goes through a Tracker instance
built with an explicit store; there is no module-level shared state.
Mutations are serialized on a per-tracker lock because each one reads a
whole collection before writing back positions or totals.
"""

from __future__ import annotations

import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any

from points import aggregate, completion, dates, tasks, templates
from points.hooks import Notifier
from points.models import Day, DaySummary, Settings, Task, TaskPatch
from points.store import EntityStore, YamlBackend
from points.workspace import load_settings, store_path, workspace_root


class Tracker:
    def __init__(
        self,
        store: EntityStore,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or Settings()
        self.notifier = notifier or Notifier()
        self._lock = threading.RLock()

    @classmethod
    def open(cls, root: Path | None = None) -> Tracker:
        """Tracker over the YAML store and config of a workspace."""
        if root is None:
            root = workspace_root()
        return cls(
            store=EntityStore(YamlBackend(store_path(root))),
            settings=load_settings(root),
            notifier=Notifier(root),
        )

    # ── Days ──────────────────────────────────────────────────

    def day(self, value: date | datetime | str | None = None) -> Day:
        """Resolve a calendar day (today when omitted), seeding defaults if enabled."""
        with self._lock:
            if value is None:
                d = dates.today(self.store, self.settings)
            else:
                d = dates.resolve_day(self.store, value, self.settings)
            if self.settings.seed_defaults:
                dates.ensure_tasks_exist(self.store, d, self.settings)
            return d

    def summary(self, day: Day) -> DaySummary:
        return aggregate.summarize(self.store, day, self.settings)

    def tasks(self, day: Day, routine: bool | None = None) -> list[Task]:
        return tasks.list_tasks(self.store, day, routine)

    def templates(self, routines_only: bool | None = None) -> list[Task]:
        return tasks.list_templates(self.store, routines_only)

    # ── Task mutations ────────────────────────────────────────

    def create(self, title: str, day: Day | None = None, **fields: Any) -> Task:
        with self._lock:
            task = tasks.create_task(self.store, self.settings, title, day=day, **fields)
            self._changed(task)
            return task

    def update(self, task_id: str, patch: TaskPatch) -> Task:
        with self._lock:
            task = tasks.find_task(self.store, task_id)
            tasks.update_task(self.store, task, patch, self.settings)
            self._points_changed(task)
            return task

    def delete(self, task_id: str) -> None:
        with self._lock:
            task = tasks.find_task(self.store, task_id)
            tasks.delete_task(self.store, task, self.settings)
            self._changed(task)

    def duplicate(self, task_id: str) -> Task:
        with self._lock:
            task = tasks.find_task(self.store, task_id)
            copy = tasks.duplicate_task(self.store, task, self.settings)
            self._changed(copy)
            return copy

    def move(self, day: Day | None, from_index: int, to_index: int) -> list[Task]:
        with self._lock:
            ordered = tasks.move_task(self.store, day, from_index, to_index)
            self._tasks_changed(day)
            return ordered

    def clear(self, day: Day) -> DaySummary:
        with self._lock:
            tasks.clear_tasks(self.store, day, self.settings)
            self._tasks_changed(day)
            return self._emit_summary(day)

    def reset(self, day: Day) -> DaySummary:
        with self._lock:
            tasks.reset_completions(self.store, day, self.settings)
            return self._emit_summary(day)

    # ── Completions ───────────────────────────────────────────

    def increment(self, task_id: str) -> Task:
        with self._lock:
            task = tasks.find_task(self.store, task_id)
            was_met = task.completed >= task.target
            if completion.increment(self.store, task, self.settings):
                if not was_met and task.completed >= task.target:
                    self.notifier.emit("on_task_complete", {"task": task.to_dict()})
                self._points_changed(task)
            return task

    def decrement(self, task_id: str) -> Task:
        with self._lock:
            task = tasks.find_task(self.store, task_id)
            if completion.decrement(self.store, task, self.settings):
                self._points_changed(task)
            return task

    # ── Templates ─────────────────────────────────────────────

    def copy_as_template(self, task_id: str) -> tuple[Task | None, list[str]]:
        with self._lock:
            task = tasks.find_task(self.store, task_id)
            template, errors = templates.copy_as_template(self.store, task)
            if template is not None:
                self._tasks_changed(None)
            return template, errors

    def apply_templates(self, day: Day, routines_only: bool | None = None) -> list[Task]:
        with self._lock:
            created = templates.apply_templates(self.store, day, self.settings, routines_only)
            if created:
                self._tasks_changed(day)
                self._emit_summary(day)
            return created

    # ── Notifications ─────────────────────────────────────────

    def _owner(self, task: Task) -> Day | None:
        if task.is_template:
            return None
        return self.store.get_day(task.day)

    def _emit_summary(self, day: Day) -> DaySummary:
        summary = self.summary(day)
        self.notifier.emit("on_points_changed", summary.to_dict())
        return summary

    def _tasks_changed(self, day: Day | None) -> None:
        ordered = tasks.list_templates(self.store) if day is None else tasks.list_tasks(self.store, day)
        self.notifier.emit("on_tasks_changed", {
            "day": day.key if day is not None else None,
            "tasks": [t.id for t in ordered],
        })

    def _points_changed(self, task: Task) -> None:
        owner = self._owner(task)
        if owner is not None:
            self._emit_summary(owner)

    def _changed(self, task: Task) -> None:
        owner = self._owner(task)
        self._tasks_changed(owner)
        if owner is not None:
            self._emit_summary(owner)
