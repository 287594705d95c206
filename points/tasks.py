"""Task CRUD, listing and ordering for Points.

Every mutation that can change a day's total ends in ``recompute`` for the
owning day, which also persists the store. Template mutations just save.
"""

from __future__ import annotations

import dataclasses
import logging
from decimal import Decimal

from points.aggregate import recompute, settle
from points.dates import today
from points.errors import TaskNotFound
from points.models import Day, Settings, Task, TaskPatch, new_id
from points.positions import append_position, densify, reorder, sort_key
from points.store import EntityStore

logger = logging.getLogger(__name__)


# ── Queries ───────────────────────────────────────────────────


def find_task(store: EntityStore, task_id: str) -> Task:
    """Find a task by ID or raise TaskNotFound."""
    task = store.get_task(task_id)
    if task is None:
        raise TaskNotFound(f"Task not found: {task_id}")
    return task


def list_tasks(store: EntityStore, day: Day, routine: bool | None = None) -> list[Task]:
    """Dated tasks for *day*, critical first then by position.

    ``routine`` narrows to routines (True) or one-off tasks (False).
    """
    tasks = store.fetch_tasks(
        lambda t: t.day == day.key and not t.template and (routine is None or t.routine == routine)
    )
    return sorted(tasks, key=sort_key)


def list_templates(store: EntityStore, routines_only: bool | None = None) -> list[Task]:
    """Templates, optionally only routines (True) or only one-offs (False)."""
    tasks = store.fetch_tasks(
        lambda t: t.is_template and (routines_only is None or t.routine == routines_only)
    )
    return sorted(tasks, key=sort_key)


def siblings(store: EntityStore, task: Task) -> list[Task]:
    """The ordered collection *task* is positioned within (itself included)."""
    if task.is_template:
        return list_templates(store)
    return sorted(store.fetch_tasks(lambda t: t.day == task.day and not t.template), key=sort_key)


def _collection(store: EntityStore, day: Day | None) -> list[Task]:
    if day is None:
        return list_templates(store)
    return list_tasks(store, day)


# ── CRUD ──────────────────────────────────────────────────────


def create_task(
    store: EntityStore,
    settings: Settings,
    title: str,
    points: Decimal | None = None,
    target: int | None = None,
    *,
    day: Day | None = None,
    reward: Decimal = Decimal("0"),
    maximum: int | None = None,
    routine: bool = False,
    optional: bool = False,
    template: bool = False,
    critical: bool = False,
) -> Task:
    """Create a task appended to the end of its collection.

    Non-template tasks bind to *day*, or to today when no day is given.
    ``maximum`` defaults to the configured ceiling, never below the target.
    """
    if target is None:
        target = settings.default_task_target
    if maximum is None:
        maximum = max(settings.default_task_max, target)
    if not template and day is None:
        day = today(store, settings)
    owner = None if template else day

    task = Task(
        title=title,
        points=Decimal(points) if points is not None else settings.default_task_points,
        target=target,
        max=maximum,
        completed=0,
        reward=Decimal(reward),
        routine=routine,
        optional=optional,
        critical=critical,
        template=template,
        position=append_position(_collection(store, owner)),
        day=owner.key if owner is not None else None,
    )
    task.clamp()
    store.add_task(task)
    settle(store, task, settings)
    logger.info("task_created id=%s day=%s template=%s", task.id, task.day, task.template)
    return task


def update_task(store: EntityStore, task: Task, patch: TaskPatch, settings: Settings) -> Task:
    """Apply a partial update, re-clamping max >= target."""
    patch.apply(task)
    settle(store, task, settings)
    return task


def delete_task(store: EntityStore, task: Task, settings: Settings) -> None:
    """Remove a task and its completions; close the gap in its collection."""
    remaining = [t for t in siblings(store, task) if t.id != task.id]
    store.remove_task(task)
    densify(remaining)
    settle(store, task, settings)
    logger.info("task_deleted id=%s day=%s", task.id, task.day)


def duplicate_task(store: EntityStore, task: Task, settings: Settings) -> Task:
    """Copy every field except id and completions; append to the same collection."""
    copy = dataclasses.replace(
        task,
        id=new_id(),
        completed=0,
        position=append_position(siblings(store, task)),
    )
    store.add_task(copy)
    settle(store, copy, settings)
    return copy


def move_task(store: EntityStore, day: Day | None, from_index: int, to_index: int) -> list[Task]:
    """Reorder a day's tasks (or the templates when *day* is None) and save."""
    ordered = reorder(_collection(store, day), from_index, to_index)
    store.save()
    return ordered


# ── Batch operations ──────────────────────────────────────────


def clear_tasks(store: EntityStore, day: Day, settings: Settings) -> None:
    """Delete every task on *day*; its total drops to zero."""
    store.remove_tasks(store.fetch_tasks(lambda t: t.day == day.key))
    recompute(store, day, settings)
    logger.info("day_cleared day=%s", day.key)


def reset_completions(store: EntityStore, day: Day, settings: Settings) -> None:
    """Soft reset: keep the tasks, zero their completion counts."""
    for task in list_tasks(store, day):
        task.completed = 0
    recompute(store, day, settings)
