"""Completion counting for Points tasks.

A task moves between NOT_STARTED, IN_PROGRESS, TARGET_MET and AT_MAX as its
``completed`` count changes. Increment at max and decrement at zero are
no-ops, not errors.
"""

from __future__ import annotations

import enum
import logging

from points.aggregate import settle
from points.models import Completion, Settings, Task
from points.store import EntityStore
from points.workspace import now_local

logger = logging.getLogger(__name__)


class CompletionState(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    TARGET_MET = "target_met"
    AT_MAX = "at_max"


def completion_state(task: Task) -> CompletionState:
    if task.completed >= task.max:
        return CompletionState.AT_MAX
    if task.completed >= task.target:
        return CompletionState.TARGET_MET
    if task.completed > 0:
        return CompletionState.IN_PROGRESS
    return CompletionState.NOT_STARTED


def increment(store: EntityStore, task: Task, settings: Settings) -> bool:
    """Add one completion. Returns False when already at max."""
    if task.completed >= task.max:
        logger.debug("increment_ignored id=%s completed=%s max=%s", task.id, task.completed, task.max)
        return False
    task.completed += 1
    if not task.is_template:
        store.add_completion(Completion(
            task_id=task.id,
            day=task.day or "",
            timestamp=now_local(settings).isoformat(timespec="seconds"),
        ))
    settle(store, task, settings)
    return True


def decrement(store: EntityStore, task: Task, settings: Settings) -> bool:
    """Remove one completion. Returns False when already at zero.

    Completion records are an append-only audit trail and are kept.
    """
    if task.completed <= 0:
        return False
    task.completed -= 1
    settle(store, task, settings)
    return True
