"""Point totals, progress and day completion for Points.

The cached total on a Day is always rebuilt from scratch by ``recompute``;
there is no incremental path.

Progress convention (``Settings.progress_mode``):
- per_day:  min(1, total / day.target)
- per_task: min(1, total / (day.target * task_count))
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Sequence

from points.dates import resolve_day
from points.models import Day, DaySummary, Settings, Task
from points.store import EntityStore

logger = logging.getLogger(__name__)

STREAK_BONUS_PER_DAY = Decimal("0.1")
MAX_STREAK_BONUS = Decimal("1.0")
TARGET_MET_BONUS = Decimal("0.2")
OVER_TARGET_BONUS = Decimal("0.1")


# ── Pure computations ─────────────────────────────────────────


def total_points(tasks: Iterable[Task]) -> int:
    """Sum of truncated per-completion points times completion count."""
    return sum(int(t.points) * t.completed for t in tasks)


def progress_ratio(total: int, target: int, task_count: int, mode: str = "per_day") -> float:
    """Progress in [0, 1]; 0 when there are no tasks or no positive goal."""
    if task_count <= 0:
        return 0.0
    goal = target * task_count if mode == "per_task" else target
    if goal <= 0:
        return 0.0
    return max(0.0, min(1.0, total / goal))


def is_day_complete(tasks: Sequence[Task]) -> bool:
    """True when every non-optional task has met its target."""
    if not tasks:
        return False
    return all(t.completed >= t.target for t in tasks if not t.optional)


def streak_bonus(consecutive_days: int) -> Decimal:
    """10% per consecutive day beyond the first, capped at 100%."""
    if consecutive_days <= 1:
        return Decimal("0")
    return min(Decimal(consecutive_days - 1) * STREAK_BONUS_PER_DAY, MAX_STREAK_BONUS)


def task_bonus(task: Task, consecutive_days: int) -> Decimal:
    """Bonus multiplier for a routine; one-off tasks never earn a bonus."""
    if not task.routine:
        return Decimal("0")
    bonus = streak_bonus(consecutive_days)
    if task.completed >= task.target:
        bonus += TARGET_MET_BONUS
    if task.completed > task.target and task.max > task.target:
        extra = Decimal(task.completed - task.target) / Decimal(task.max - task.target)
        bonus += extra * OVER_TARGET_BONUS
    return bonus


def earned_points(task: Task, bonus: Decimal = Decimal("0")) -> Decimal:
    """Points a task would award with a bonus applied, plus its reward.

    Routines earn pro rata (completed / target, capped at max / target).
    One-off tasks earn nothing until their target is met.
    """
    points = task.points
    if bonus > 0:
        points *= 1 + bonus
    if task.routine:
        ratio = min(Decimal(task.completed) / task.target, Decimal(task.max) / task.target)
        points *= ratio
    elif task.completed < task.target:
        points = Decimal("0")
    return points + task.reward


# ── Store-backed operations ───────────────────────────────────


def day_tasks(store: EntityStore, day: Day) -> list[Task]:
    return store.fetch_tasks(lambda t: t.day == day.key and not t.template)


def summarize(store: EntityStore, day: Day, settings: Settings) -> DaySummary:
    """Aggregate for *day* from its current tasks; writes nothing."""
    tasks = day_tasks(store, day)
    total = total_points(tasks)
    return DaySummary(
        day=day.key,
        points=total,
        target=day.target,
        progress=progress_ratio(total, day.target, len(tasks), settings.progress_mode),
        task_count=len(tasks),
        complete=is_day_complete(tasks),
    )


def recompute(store: EntityStore, day: Day, settings: Settings) -> DaySummary:
    """Rebuild and persist ``day.cached_points``; returns the new summary."""
    summary = summarize(store, day, settings)
    day.cached_points = Decimal(summary.points)
    store.save()
    logger.debug("points_recomputed day=%s points=%s", day.key, summary.points)
    return summary


def progress(store: EntityStore, day: Day, settings: Settings) -> float:
    return summarize(store, day, settings).progress


def settle(store: EntityStore, task: Task, settings: Settings) -> DaySummary | None:
    """Persist after a change to *task*, recomputing its day if it has one."""
    if task.is_template:
        store.save()
        return None
    return recompute(store, resolve_day(store, task.day, settings), settings)
